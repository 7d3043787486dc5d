"""
Cache Repositories - persistent Spoonacular response cache and daily quota ledger
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Set

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import OperationFailure

from adapters import mongo_adapter
from domain.enums import QuotaEndpoint

logger = logging.getLogger("smartplates.repositories.cache")


class ApiCacheRepository:
    """
    One collection of cached API responses.

    Document layout::

        {
            cache_key, data, created_at, updated_at,
            expires_at,          # fresh until this moment
            purge_at,            # expires_at + stale window; TTL index removes after this
            request_count, last_accessed,
            ...kind specific metadata (query, filters, ingredients, tags, spoonacular_id)
        }
    """

    def __init__(self, collection_name: str, db=None):
        self.db = db if db is not None else mongo_adapter.get_db()
        self.collection_name = collection_name
        self.collection = mongo_adapter.get_collection(collection_name, self.db)

    def ensure_indexes(self) -> None:
        self.collection.create_index([("cache_key", ASCENDING)], unique=True)
        try:
            self.collection.create_index([("purge_at", ASCENDING)], expireAfterSeconds=0)
        except OperationFailure as exc:
            logger.warning("TTL index on %s not created: %s", self.collection_name, exc)

    def find(self, cache_key: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"cache_key": cache_key})

    def upsert(
        self,
        cache_key: str,
        data: Any,
        ttl_seconds: int,
        stale_seconds: int = 0,
        now: Optional[datetime] = None,
        **meta: Any,
    ) -> Dict[str, Any]:
        now = now or datetime.utcnow()
        expires_at = now + timedelta(seconds=ttl_seconds)
        fields = {
            "data": data,
            "updated_at": now,
            "expires_at": expires_at,
            "purge_at": expires_at + timedelta(seconds=stale_seconds),
            "last_accessed": now,
        }
        fields.update(meta)
        return self.collection.find_one_and_update(
            {"cache_key": cache_key},
            {
                "$set": fields,
                "$setOnInsert": {"created_at": now},
                "$inc": {"request_count": 1},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def touch(self, cache_key: str, now: Optional[datetime] = None) -> None:
        """Record a cache hit."""
        self.collection.update_one(
            {"cache_key": cache_key},
            {"$inc": {"request_count": 1}, "$set": {"last_accessed": now or datetime.utcnow()}},
        )

    def delete_expired(self, now: Optional[datetime] = None) -> int:
        """Remove entries past their stale window (the TTL index does this too, lazily)."""
        now = now or datetime.utcnow()
        return self.collection.delete_many({"purge_at": {"$lt": now}}).deleted_count

    def count(self, fresh_only: bool = False, now: Optional[datetime] = None) -> int:
        if fresh_only:
            return self.collection.count_documents({"expires_at": {"$gte": now or datetime.utcnow()}})
        return self.collection.count_documents({})

    def existing_keys(self, keys: List[str]) -> Set[str]:
        """Subset of ``keys`` that already have an entry."""
        if not keys:
            return set()
        return {d["cache_key"] for d in self.collection.find({"cache_key": {"$in": keys}}, {"cache_key": 1})}


def _empty_endpoints() -> Dict[str, int]:
    return {e.value: 0 for e in QuotaEndpoint}


class QuotaRepository:
    """One document per UTC day counting Spoonacular points spent."""

    def __init__(self, db=None, quota_limit: int = 150):
        self.db = db if db is not None else mongo_adapter.get_db()
        self.collection = mongo_adapter.get_collection("quota", self.db)
        self.quota_limit = quota_limit

    def ensure_indexes(self) -> None:
        self.collection.create_index([("date", ASCENDING)], unique=True)

    @staticmethod
    def day_key(now: datetime) -> str:
        return now.strftime("%Y-%m-%d")

    @staticmethod
    def next_reset(now: datetime) -> datetime:
        return datetime(now.year, now.month, now.day) + timedelta(days=1)

    def _insert_defaults(self, now: datetime) -> Dict[str, Any]:
        return {
            "date": self.day_key(now),
            "quota_limit": self.quota_limit,
            "reset_time": self.next_reset(now),
            "is_quota_exceeded": False,
            "created_at": now,
        }

    def get_or_create_today(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.utcnow()
        defaults = self._insert_defaults(now)
        defaults["request_count"] = 0
        defaults["endpoints"] = _empty_endpoints()
        defaults["updated_at"] = now
        return self.collection.find_one_and_update(
            {"date": self.day_key(now)},
            {"$setOnInsert": defaults},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def record_usage(
        self,
        endpoint: str,
        points: int = 1,
        quota_used: Optional[float] = None,
        quota_left: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Atomically count a call; sync with the API's own quota headers when present."""
        now = now or datetime.utcnow()
        update: Dict[str, Any] = {
            "$inc": {"request_count": int(points), f"endpoints.{endpoint}": 1},
            "$set": {"updated_at": now},
            "$setOnInsert": self._insert_defaults(now),
        }
        doc = self.collection.find_one_and_update(
            {"date": self.day_key(now)}, update, upsert=True, return_document=ReturnDocument.AFTER
        )

        sync: Dict[str, Any] = {}
        if quota_used is not None and quota_used > doc.get("request_count", 0):
            sync["request_count"] = int(quota_used)
        if quota_left is not None:
            sync["api_quota_left"] = float(quota_left)
            if quota_left <= 0:
                sync["is_quota_exceeded"] = True
        used = sync.get("request_count", doc.get("request_count", 0))
        if used >= doc.get("quota_limit", self.quota_limit):
            sync["is_quota_exceeded"] = True
        if sync:
            doc = self.collection.find_one_and_update(
                {"_id": doc["_id"]}, {"$set": sync}, return_document=ReturnDocument.AFTER
            )
        return doc

    def mark_exhausted(self, now: Optional[datetime] = None) -> None:
        now = now or datetime.utcnow()
        self.get_or_create_today(now)
        self.collection.update_one(
            {"date": self.day_key(now)},
            {"$set": {"is_quota_exceeded": True, "updated_at": now}},
        )
