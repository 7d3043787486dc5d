"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    SmartPlatesError,
    ServiceValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    RateLimitExceededError,
    QuotaExceededError,
    ExternalServiceError,
)

__all__ = [
    "settings",
    "SmartPlatesError",
    "ServiceValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "RateLimitExceededError",
    "QuotaExceededError",
    "ExternalServiceError",
]
