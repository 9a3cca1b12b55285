"""
Custom Exception Classes for the Resume Matcher API
"""
import asyncio
import functools
import time
from random import uniform
from typing import Any, Awaitable, Callable, Dict, TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class MatcherBaseException(Exception):
    """Base exception for the Resume Matcher API"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/response"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(MatcherBaseException):
    """Raised when request data validation fails"""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        if value is not None:
            details['invalid_value'] = str(value)
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)


class ExtractionError(MatcherBaseException):
    """Raised when a file cannot be turned into text"""

    def __init__(self, message: str, file_name: str = None, content_type: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if file_name:
            details['file_name'] = file_name
        if content_type:
            details['content_type'] = content_type
        self.file_name = file_name
        super().__init__(message, error_code="EXTRACTION_ERROR", details=details, **kwargs)


class ExternalCallError(MatcherBaseException):
    """Raised when the field-guessing service fails"""

    def __init__(self, message: str, service_name: str = None, status_code: int = None, **kwargs):
        details = kwargs.pop('details', {})
        if service_name:
            details['service_name'] = service_name
        if status_code:
            details['status_code'] = status_code
        self.status_code = status_code
        super().__init__(message, error_code=kwargs.pop('error_code', "EXTERNAL_CALL_ERROR"), details=details, **kwargs)


class RateLimitError(ExternalCallError):
    """Raised when the field-guessing service reports a rate limit or exhausted quota"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="RATE_LIMIT_ERROR", **kwargs)


class ConfigurationError(MatcherBaseException):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_key: str = None, config_value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if config_key:
            details['config_key'] = config_key
        if config_value is not None:
            details['config_value'] = str(config_value)
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


# HTTP Exception Mapping
def map_to_http_exception(exc: MatcherBaseException) -> HTTPException:
    """Map custom exceptions to HTTP exceptions"""

    status_code_mapping = {
        ValidationError: 400,
        ConfigurationError: 500,
        ExtractionError: 422,
        RateLimitError: 429,
        ExternalCallError: 502,
    }

    status_code = status_code_mapping.get(type(exc), 500)

    detail = {
        "error": exc.to_dict(),
        "message": exc.message
    }

    return HTTPException(status_code=status_code, detail=detail)


# Exception context manager for better error handling
class ExceptionContext:
    """Context manager for handling exceptions with additional context"""

    def __init__(self, operation: str, logger=None, **context):
        self.operation = operation
        self.logger = logger
        self.context = context

    def __enter__(self):
        if self.logger:
            self.logger.debug(f"Starting operation: {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            if self.logger:
                self.logger.debug(f"Operation completed: {self.operation}", extra=self.context)
            return False

        if self.logger:
            self.logger.error(
                f"Operation failed: {self.operation} - {exc_val}",
                extra={**self.context, "exception_type": exc_type.__name__}
            )

        # Domain errors and HTTP errors already carry their status
        if isinstance(exc_val, (MatcherBaseException, HTTPException)):
            return False

        if isinstance(exc_val, (KeyError, ValueError, TypeError)):
            raise ValidationError(
                f"Validation error in {self.operation}: {str(exc_val)}",
                details=dict(self.context),
                cause=exc_val
            ) from exc_val

        raise MatcherBaseException(
            f"Processing error in {self.operation}: {str(exc_val)}",
            error_code="PROCESSING_ERROR",
            details=dict(self.context),
            cause=exc_val
        ) from exc_val


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 2.0,
    logger=None,
    sleep: Callable[[float], Awaitable[Any]] = None,
) -> T:
    """
    Await ``operation()`` up to ``max_attempts`` times.

    Every exception is retried. The wait before retry ``n`` (1-based) is
    ``base_delay * 2 ** (n - 1)``. When the budget is spent the last error
    is re-raised unchanged. No state is kept between calls, so independent
    files can retry concurrently.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    sleep = sleep or asyncio.sleep

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt == max_attempts:
                if logger:
                    logger.error(f"All {max_attempts} attempts failed: {str(e)}")
                raise
            delay = base_delay * (2 ** (attempt - 1))
            if logger:
                logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed: {str(e)}. Retrying in {delay:.1f}s"
                )
            await sleep(delay)


# Retry decorator with exponential backoff
def retry_with_logging(
    max_attempts: int = 3,
    backoff_factor: float = 1.0,
    exceptions: tuple = (Exception,),
    logger=None,
    jitter: bool = True
):
    """Decorator to retry blocking operations with exponential backoff and logging"""

    def _sleep_time(attempt: int) -> float:
        return backoff_factor * (2 ** attempt) + (uniform(0, 1) if jitter else 0)

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if logger:
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {str(e)}"
                        )
                    if attempt == max_attempts - 1:
                        if logger:
                            logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
                        raise
                    time.sleep(_sleep_time(attempt))

        return wrapper

    return decorator
