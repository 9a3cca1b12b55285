"""
Centralized Logging Configuration for the Resume Matcher API
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

LOGGER_PREFIX = "resume_matcher"


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    enable_console: bool = True,
    enable_file: bool = True,
    format_style: str = "detailed"
) -> None:
    """
    Setup centralized logging configuration

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (defaults to logs/resume_matcher_<date>.log)
        enable_console: Enable console logging
        enable_file: Enable file logging
        format_style: Format style ('simple', 'detailed', 'json')
    """
    log_dir = Path(os.getenv("LOG_DIR", "logs"))

    formats = {
        "simple": "%(levelname)s - %(name)s - %(message)s",
        "detailed": "%(asctime)s | %(levelname)-8s | %(name)-40s | %(funcName)-24s:%(lineno)-4d | %(message)s",
        "json": '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "function": "%(funcName)s", "line": %(lineno)d, "message": "%(message)s"}'
    }

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": formats.get(format_style, formats["detailed"]),
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "simple": {
                "format": formats["simple"]
            }
        },
        "handlers": {},
        "loggers": {
            LOGGER_PREFIX: {
                "level": level,
                "handlers": [],
                "propagate": True
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": [],
                "propagate": False
            },
            # pdfminer is very chatty on malformed PDFs
            "pdfminer": {
                "level": "ERROR",
                "handlers": [],
                "propagate": True
            }
        }
    }

    if enable_console:
        config["handlers"]["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "simple" if format_style == "simple" else "detailed",
            "stream": "ext://sys.stdout"
        }
        config["loggers"][LOGGER_PREFIX]["handlers"].append("console")
        config["loggers"]["uvicorn"]["handlers"].append("console")

    if enable_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        if log_file is None:
            log_file = log_dir / f"{LOGGER_PREFIX}_{datetime.now().strftime('%Y%m%d')}.log"
        error_log_file = log_dir / f"{LOGGER_PREFIX}_errors_{datetime.now().strftime('%Y%m%d')}.log"

        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": str(log_file),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf8"
        }
        config["handlers"]["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filename": str(error_log_file),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf8"
        }
        config["loggers"][LOGGER_PREFIX]["handlers"].extend(["file", "error_file"])
        config["loggers"]["uvicorn"]["handlers"].append("file")

    logging.config.dictConfig(config)

    logger = get_logger("logging")
    logger.info(f"Logging configured - Level: {level}, Console: {enable_console}, File: {enable_file}")
    if enable_file:
        logger.info(f"Log file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with consistent naming

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def log_api_call(operation: str):
    """
    Decorator to log API endpoint calls
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(f"api.{func.__module__}")
            start_time = time.time()

            logger.info(f"API {operation} started - {func.__name__}")

            try:
                result = await func(*args, **kwargs)
                execution_time = time.time() - start_time
                logger.info(f"API {operation} completed in {execution_time:.3f}s", extra={"execution_time": execution_time})
                return result
            except Exception as e:
                execution_time = time.time() - start_time
                logger.error(f"API {operation} failed after {execution_time:.3f}s: {str(e)}",
                             extra={"execution_time": execution_time, "error": str(e)})
                raise

        return wrapper
    return decorator


def configure_for_environment():
    """Configure logging based on environment variables"""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    if environment == "production":
        setup_logging(
            level=log_level,
            enable_console=True,
            enable_file=True,
            format_style="detailed"
        )
    elif environment == "development":
        setup_logging(
            level="DEBUG",
            enable_console=True,
            enable_file=True,
            format_style="detailed"
        )
    elif environment == "testing":
        setup_logging(
            level="WARNING",
            enable_console=True,
            enable_file=False,
            format_style="simple"
        )
    else:
        setup_logging(level=log_level)


class PerformanceMonitor:
    """Context manager for monitoring performance with logging"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        execution_time = (time.time() - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {execution_time:.2f}ms: {exc_val}")
        elif execution_time > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} completed in {execution_time:.2f}ms (exceeded threshold {self.threshold_ms}ms)")
        else:
            self.logger.info(f"{self.operation_name} completed in {execution_time:.2f}ms")
