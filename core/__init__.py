"""
Core package - framework-free building blocks: TTL cache, rate limiting and text helpers.
"""

from core.ttl_cache import TTLCache
from core.rate_limiter import (
    RateLimiter,
    RateLimitResult,
    spoonacular_rate_limiter,
    api_rate_limiter,
    upload_rate_limiter,
    search_rate_limiter,
)

__all__ = [
    "TTLCache",
    "RateLimiter",
    "RateLimitResult",
    "spoonacular_rate_limiter",
    "api_rate_limiter",
    "upload_rate_limiter",
    "search_rate_limiter",
]
