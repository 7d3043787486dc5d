"""
API dependencies for dependency injection
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Header, Request

from adapters import mongo_adapter
from app.exceptions import ForbiddenError, RateLimitExceededError, UnauthorizedError
from core.rate_limiter import RateLimiter, api_rate_limiter, search_rate_limiter
from domain.enums import UserRole
from repositories import UserRepository
from services.recipe_cache_service import RecipeCacheService, get_cache_service


def get_db():
    """
    Database handle dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db=Depends(get_db)):
            # Use db here
            pass
    """
    return mongo_adapter.get_db()


def get_cache() -> RecipeCacheService:
    """Shared Spoonacular cache service."""
    return get_cache_service()


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _enforce(limiter: RateLimiter, key: str) -> None:
    result = limiter.check(key)
    if not result.allowed:
        raise RateLimitExceededError(
            "Too many requests, slow down",
            retry_after=result.retry_after,
            remaining=result.remaining,
        )


def rate_limit(request: Request) -> None:
    """Per-client request limit; raises 429 with Retry-After when exceeded."""
    _enforce(api_rate_limiter, client_key(request))


def search_rate_limit(request: Request) -> None:
    """Daily per-client cap on searches that may reach Spoonacular or OpenAI."""
    _enforce(search_rate_limiter, client_key(request))


def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Resolve the X-User-Id header to an active user document."""
    if not x_user_id:
        raise UnauthorizedError("Authentication required")
    user = UserRepository(db).get_by_id(x_user_id)
    if not user:
        raise UnauthorizedError("Unknown user")
    if not user.get("is_active", True):
        raise UnauthorizedError("Account is deactivated")
    return user


def get_optional_user(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    db=Depends(get_db),
) -> Optional[Dict[str, Any]]:
    if not x_user_id:
        return None
    return UserRepository(db).get_by_id(x_user_id)


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != UserRole.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return user
