"""
Exception handling and timing middleware for the Resume Matcher API
"""
import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.exceptions import MatcherBaseException, map_to_http_exception
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


def error_response(request_id: str, status_code: int, detail: Any) -> JSONResponse:
    """Create standardized error response"""
    if isinstance(detail, str):
        detail = {"message": detail}
    elif not isinstance(detail, dict):
        detail = {"message": str(detail)}

    error_response = {
        "success": False,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "status_code": status_code,
        **detail
    }

    return JSONResponse(
        status_code=status_code,
        content=error_response,
        headers={"X-Request-ID": request_id}
    )


async def matcher_exception_handler(request: Request, exc: MatcherBaseException) -> JSONResponse:
    """Turn domain exceptions raised by endpoints into JSON error responses"""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    logger.error(
        f"Custom exception in {request.method} {request.url.path}: {exc.message}",
        extra={
            "request_id": request_id,
            "exception_type": exc.__class__.__name__,
            "error_code": exc.error_code,
            "details": exc.details,
        }
    )
    http_exc = map_to_http_exception(exc)
    return error_response(request_id, http_exc.status_code, http_exc.detail)


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Innermost of the app middleware: tags requests and hides unexpected failures"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "client_ip": request.client.host if request.client else "unknown"
            }
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled exception in {request.method} {request.url.path}: {str(exc)}",
                extra={
                    "request_id": request_id,
                    "exception_type": exc.__class__.__name__,
                    "traceback": traceback.format_exc(),
                },
                exc_info=True
            )
            # Don't expose internal errors
            return error_response(request_id, 500, {
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            })

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={"request_id": request_id, "status_code": response.status_code}
        )
        response.headers["X-Request-ID"] = request_id
        return response


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Middleware for performance monitoring"""

    def __init__(self, app, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        processing_time = time.time() - start_time

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} took {processing_time:.3f}s",
                extra={"processing_time": processing_time, "threshold": self.slow_request_threshold}
            )
        else:
            logger.debug(f"Request performance: {request.method} {request.url.path} - {processing_time:.3f}s")

        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response
