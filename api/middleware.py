"""
Consolidated middleware for the SmartPlates API
"""

import time
import logging
from datetime import date, datetime
from uuid import uuid4
from decimal import Decimal

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.exceptions import SmartPlatesError, RateLimitExceededError

logger = logging.getLogger("smartplates.middleware")


# ============================================================================
# Helper Functions
# ============================================================================


def make_serializable(obj):
    """Convert objects to JSON-serializable format"""
    if isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {k: make_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [make_serializable(item) for item in obj]
    elif isinstance(obj, Exception):
        return str(obj)
    return obj


def _error_body(code: str, message, details=None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {
        "success": False,
        "error": error,
        "timestamp": datetime.utcnow().isoformat(),
    }


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all HTTP requests and responses"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else None,
            },
        )

        start_time = time.time()

        try:
            response: Response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                "Request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "url": str(request.url),
                    "status_code": response.status_code,
                    "process_time": f"{process_time:.4f}s",
                },
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            return response

        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "url": str(request.url),
                    "error": str(exc),
                    "process_time": f"{process_time:.4f}s",
                },
                exc_info=True,
            )
            raise


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error on {request.url}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=_error_body(
            "VALIDATION_ERROR", "Request validation failed", make_serializable(exc.errors())
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP {exc.status_code} on {request.url}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(f"HTTP_{exc.status_code}", exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def smartplates_exception_handler(request: Request, exc: SmartPlatesError):
    """Handle domain errors; the status code comes from the exception class"""
    if exc.http_status >= 500:
        logger.error(f"{exc.code} on {request.url}: {exc}")
    else:
        logger.warning(f"{exc.code} on {request.url}: {exc}")

    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Remaining": str(exc.remaining),
        }

    return JSONResponse(
        status_code=exc.http_status,
        content=_error_body(exc.code, exc.message, make_serializable(exc.details)),
        headers=headers,
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )
