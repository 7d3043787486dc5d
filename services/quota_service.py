"""Daily Spoonacular quota accounting."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from app.config import settings
from repositories.cache_repository import QuotaRepository

logger = logging.getLogger("smartplates.quota")


@dataclass
class QuotaAllowance:
    allowed: bool
    remaining: int
    used: int
    limit: int


class QuotaService:
    """Tracks points spent per UTC day and keeps a reserve buffer untouched."""

    def __init__(
        self,
        repo: QuotaRepository,
        limit: int = settings.spoonacular_daily_quota,
        buffer: int = settings.spoonacular_quota_buffer,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.repo = repo
        self.limit = limit
        self.buffer = buffer
        self._clock = clock
        self.repo.quota_limit = limit

    def check_allowance(self, now: Optional[datetime] = None) -> QuotaAllowance:
        doc = self.repo.get_or_create_today(now or self._clock())
        used = int(doc.get("request_count", 0))
        remaining = self.limit - used
        api_left = doc.get("api_quota_left")
        if api_left is not None:
            remaining = min(remaining, int(api_left))
        remaining = max(0, remaining)
        allowed = remaining > self.buffer and not doc.get("is_quota_exceeded", False)
        if not allowed:
            logger.warning(f"quota_refused used={used} limit={self.limit} buffer={self.buffer}")
        return QuotaAllowance(allowed=allowed, remaining=remaining, used=used, limit=self.limit)

    def record_usage(
        self,
        endpoint: str,
        points: int = 1,
        quota_used: Optional[float] = None,
        quota_left: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        doc = self.repo.record_usage(
            endpoint,
            points=points,
            quota_used=quota_used,
            quota_left=quota_left,
            now=now or self._clock(),
        )
        logger.info(
            f"quota_recorded endpoint={endpoint} used={doc.get('request_count')} "
            f"api_left={doc.get('api_quota_left')}"
        )
        return doc

    def mark_exhausted(self, now: Optional[datetime] = None) -> None:
        logger.warning("quota_exhausted reported by Spoonacular")
        self.repo.mark_exhausted(now or self._clock())

    def status(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or self._clock()
        doc = self.repo.get_or_create_today(now)
        allowance = self.check_allowance(now)
        return {
            "date": doc["date"],
            "used": allowance.used,
            "limit": self.limit,
            "remaining": allowance.remaining,
            "buffer": self.buffer,
            "can_make_requests": allowance.allowed,
            "is_quota_exceeded": bool(doc.get("is_quota_exceeded", False)),
            "api_quota_left": doc.get("api_quota_left"),
            "reset_time": doc.get("reset_time"),
            "endpoints": doc.get("endpoints") or {},
        }
