import math
from typing import Any, Mapping, Optional


class SmartPlatesError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str = "Error", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(SmartPlatesError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_code = "SERVICE_VALIDATION_ERROR"

    def __init__(self, message: str = "Invalid input", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class UnauthorizedError(SmartPlatesError):
    """Raised when the caller is not authenticated or the credentials are wrong."""

    http_status = 401
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class ForbiddenError(SmartPlatesError):
    """Raised when the caller is authenticated but may not perform the action."""

    http_status = 403
    default_code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class NotFoundError(SmartPlatesError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_code = "NOT_FOUND"

    def __init__(self, message: str = "Not found", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class ConflictError(SmartPlatesError):
    """Raised when a resource conflict occurs (e.g., duplicate entry)."""

    http_status = 409
    default_code = "CONFLICT"

    def __init__(self, message: str = "Conflict", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class RateLimitExceededError(SmartPlatesError):
    """Raised when a fixed-window rate limiter rejects a request.

    ``retry_after`` is the number of whole seconds until the window resets.
    """

    http_status = 429
    default_code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Too many requests", retry_after: float = 0, remaining: int = 0, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)
        self.retry_after = max(0, math.ceil(retry_after))
        self.remaining = max(0, int(remaining))


class QuotaExceededError(SmartPlatesError):
    """Raised when the daily external API quota is exhausted and nothing cached can be served."""

    http_status = 429
    default_code = "QUOTA_EXCEEDED"

    def __init__(self, message: str = "Daily API quota exceeded", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class ExternalServiceError(SmartPlatesError):
    """Raised when an upstream service (Spoonacular, OpenAI) fails or is not configured."""

    http_status = 502
    default_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, message: str = "External service error", status_code: Optional[int] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)
        self.status_code = status_code
