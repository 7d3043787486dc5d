"""
Fixed-window rate limiting.

Each key gets a window that opens on its first request and lasts
``window_seconds``. Requests inside the window are counted; once the count
reaches ``max_requests`` further requests are rejected until the window
expires, at which point the next request opens a fresh window.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from app.config import settings

logger = logging.getLogger("smartplates.ratelimit")


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float
    retry_after: float = 0.0


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        key_prefix: str = "default",
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def check(self, key: str = "global") -> RateLimitResult:
        """Count a request against ``key`` and report whether it is allowed."""
        now = self._clock()
        full_key = self._key(key)
        with self._lock:
            entry = self._entries.get(full_key)

            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                self._entries[full_key] = entry
                return RateLimitResult(True, self.max_requests - 1, entry.reset_at)

            if entry.count >= self.max_requests:
                logger.warning(
                    "rate_limited key=%s count=%d max=%d", full_key, entry.count, self.max_requests
                )
                return RateLimitResult(False, 0, entry.reset_at, entry.reset_at - now)

            entry.count += 1
            return RateLimitResult(True, self.max_requests - entry.count, entry.reset_at)

    def can_make_request(self, key: str = "global") -> bool:
        return self.check(key).allowed

    def get_remaining(self, key: str = "global") -> int:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(self._key(key))
            if entry is None or now > entry.reset_at:
                return self.max_requests
            return max(0, self.max_requests - entry.count)

    def get_time_until_reset(self, key: str = "global") -> float:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(self._key(key))
            if entry is None or now > entry.reset_at:
                return 0.0
            return max(0.0, entry.reset_at - now)

    def cleanup(self) -> int:
        """Remove expired windows."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now > e.reset_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


spoonacular_rate_limiter = RateLimiter(
    settings.spoonacular_rate_max, settings.spoonacular_rate_window, key_prefix="spoonacular"
)
api_rate_limiter = RateLimiter(settings.api_rate_max, settings.api_rate_window, key_prefix="api")
upload_rate_limiter = RateLimiter(
    settings.upload_rate_max, settings.upload_rate_window, key_prefix="upload"
)
search_rate_limiter = RateLimiter(
    settings.search_rate_max, settings.search_rate_window, key_prefix="search"
)
