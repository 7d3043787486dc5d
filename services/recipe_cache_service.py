"""
Cache-aside layer in front of Spoonacular.

Lookup order for every call:
    1. in-process TTL cache
    2. MongoDB cache collection for the kind (fresh entries only)
    3. Spoonacular, if the daily quota and the rate limiter allow it
Expired entries are kept for a stale window and served when the API cannot be
called (quota, rate limit) or fails.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from app.config import settings
from app.exceptions import ExternalServiceError, ServiceValidationError
from adapters import mongo_adapter, spoonacular_adapter
from adapters.spoonacular_adapter import SpoonacularClient
from core.rate_limiter import RateLimiter, spoonacular_rate_limiter
from core.ttl_cache import TTLCache
from core.utils import helpers
from domain.enums import CacheKind, QuotaEndpoint
from domain.mappers.recipe_mapper import RecipeMapper
from repositories.cache_repository import ApiCacheRepository, QuotaRepository
from services.quota_service import QuotaService

logger = logging.getLogger("smartplates.cache")


@dataclass
class CachedResult:
    data: Any
    from_cache: bool
    source: str  # memory | database | api | stale | none
    stale: bool = False
    quota_exceeded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "from_cache": self.from_cache,
            "source": self.source,
            "stale": self.stale,
            "quota_exceeded": self.quota_exceeded,
        }


_KIND_CONFIG = {
    CacheKind.SEARCH: ("cache_search", "cache_search_ttl", QuotaEndpoint.COMPLEX_SEARCH),
    CacheKind.RECIPE: ("cache_recipe", "cache_recipe_ttl", QuotaEndpoint.RECIPE_INFORMATION),
    CacheKind.INGREDIENTS: ("cache_ingredients", "cache_ingredients_ttl", QuotaEndpoint.FIND_BY_INGREDIENTS),
    CacheKind.RANDOM: ("cache_random", "cache_random_ttl", QuotaEndpoint.RANDOM),
    CacheKind.NUTRITION: ("cache_nutrition", "cache_nutrition_ttl", QuotaEndpoint.NUTRITION),
}


class RecipeCacheService:
    def __init__(
        self,
        db,
        client: SpoonacularClient,
        limiter: RateLimiter,
        memory: Optional[TTLCache] = None,
        quota: Optional[QuotaService] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        stale_window: int = settings.cache_stale_window,
    ):
        self.client = client
        self.limiter = limiter
        self._clock = clock
        self.memory = memory if memory is not None else TTLCache(settings.cache_memory_ttl, clock=lambda: clock().timestamp())
        self.quota = quota if quota is not None else QuotaService(QuotaRepository(db), clock=clock)
        self.stale_window = stale_window
        self.repos: Dict[CacheKind, ApiCacheRepository] = {}
        self.ttls: Dict[CacheKind, int] = {}
        self.endpoints: Dict[CacheKind, str] = {}
        for kind, (collection, ttl_setting, endpoint) in _KIND_CONFIG.items():
            self.repos[kind] = ApiCacheRepository(collection, db=db)
            self.ttls[kind] = getattr(settings, ttl_setting)
            self.endpoints[kind] = endpoint.value

    def ensure_indexes(self) -> None:
        for repo in self.repos.values():
            repo.ensure_indexes()
        self.quota.repo.ensure_indexes()

    # ------------------ Pipeline ------------------
    def _memory_ttl(self, kind: CacheKind, expires_at: Optional[datetime] = None, now: Optional[datetime] = None) -> float:
        ttl = min(settings.cache_memory_ttl, self.ttls[kind])
        if expires_at is not None and now is not None:
            ttl = min(ttl, (expires_at - now).total_seconds())
        return max(ttl, 1)

    def _stale(self, entry: Optional[Dict[str, Any]], now: datetime, quota_exceeded: bool) -> Optional[CachedResult]:
        if entry is None:
            return None
        purge_at = entry.get("purge_at") or entry.get("expires_at")
        if purge_at is None or now > purge_at:
            return None
        logger.warning(f"cache_stale_served key={entry['cache_key']}")
        return CachedResult(entry["data"], True, "stale", stale=True, quota_exceeded=quota_exceeded)

    def _lookup(
        self,
        kind: CacheKind,
        cache_key: str,
        fetch: Callable[[], Any],
        empty: Any = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> CachedResult:
        hit = self.memory.get(cache_key)
        if hit is not None:
            logger.info(f"cache_hit layer=memory key={cache_key}")
            return CachedResult(hit, True, "memory")

        repo = self.repos[kind]
        now = self._clock()
        entry = repo.find(cache_key)
        if entry is not None and now <= entry["expires_at"]:
            repo.touch(cache_key, now)
            self.memory.set(cache_key, entry["data"], ttl=self._memory_ttl(kind, entry["expires_at"], now))
            logger.info(f"cache_hit layer=database key={cache_key}")
            return CachedResult(entry["data"], True, "database")

        logger.info(f"cache_miss key={cache_key}")
        allowance = self.quota.check_allowance(now)
        if not allowance.allowed or not self.limiter.can_make_request("global"):
            stale = self._stale(entry, now, quota_exceeded=True)
            if stale is not None:
                return stale
            logger.warning(f"cache_unavailable key={cache_key} remaining={allowance.remaining}")
            return CachedResult(empty, False, "none", quota_exceeded=True)

        try:
            data = fetch()
        except ExternalServiceError as exc:
            if exc.status_code == 402:
                self.quota.mark_exhausted(now)
            stale = self._stale(entry, now, quota_exceeded=exc.status_code == 402)
            if stale is not None:
                return stale
            raise

        self.quota.record_usage(
            self.endpoints[kind],
            quota_used=self.client.last_quota.get("used"),
            quota_left=self.client.last_quota.get("left"),
            now=now,
        )
        if data is None:
            return CachedResult(empty, False, "api")

        repo.upsert(cache_key, data, self.ttls[kind], self.stale_window, now=now, **(meta or {}))
        self.memory.set(cache_key, data, ttl=self._memory_ttl(kind))
        return CachedResult(data, False, "api")

    # ------------------ Operations ------------------
    def search_recipes(self, query: Optional[str], filters: Optional[Dict[str, Any]] = None) -> CachedResult:
        filters = {k: v for k, v in (filters or {}).items() if v not in (None, "", [])}
        query = (query or "").strip().lower()
        key = helpers.search_cache_key(query, filters)
        return self._lookup(
            CacheKind.SEARCH,
            key,
            lambda: self.client.complex_search(query, filters),
            empty={"results": [], "totalResults": 0},
            meta={"query": query, "filters": filters},
        )

    def get_recipe(self, recipe_id: Any) -> CachedResult:
        spoonacular_id = RecipeMapper.parse_external_id(recipe_id)
        if spoonacular_id is None:
            raise ServiceValidationError(f"Invalid Spoonacular recipe id: {recipe_id}")
        return self._lookup(
            CacheKind.RECIPE,
            helpers.recipe_cache_key(spoonacular_id),
            lambda: self.client.get_recipe_information(spoonacular_id),
            meta={"spoonacular_id": spoonacular_id},
        )

    def search_by_ingredients(self, ingredients: Iterable[str], number: int = SpoonacularClient.DEFAULT_NUMBER) -> CachedResult:
        names = sorted({i.strip().lower() for i in ingredients if i and i.strip()})
        if not names:
            raise ServiceValidationError("At least one ingredient is required")
        return self._lookup(
            CacheKind.INGREDIENTS,
            helpers.ingredients_cache_key(names),
            lambda: self.client.find_by_ingredients(names, number=number),
            empty=[],
            meta={"ingredients": names},
        )

    def get_popular_recipes(self, tags: Optional[Iterable[str]] = None, number: int = SpoonacularClient.DEFAULT_NUMBER) -> CachedResult:
        tag_list = sorted({t.strip().lower() for t in (tags or []) if t and t.strip()})
        return self._lookup(
            CacheKind.RANDOM,
            helpers.random_cache_key(tag_list, number),
            lambda: self.client.random_recipes(tag_list, number=number),
            empty=[],
            meta={"tags": tag_list, "number": number},
        )

    def get_nutrition(self, recipe_id: Any) -> CachedResult:
        spoonacular_id = RecipeMapper.parse_external_id(recipe_id)
        if spoonacular_id is None:
            raise ServiceValidationError(f"Invalid Spoonacular recipe id: {recipe_id}")
        return self._lookup(
            CacheKind.NUTRITION,
            helpers.nutrition_cache_key(spoonacular_id),
            lambda: self.client.nutrition_widget(spoonacular_id),
            meta={"recipe_id": spoonacular_id},
        )

    # ------------------ Maintenance ------------------
    def get_quota_status(self) -> Dict[str, Any]:
        return self.quota.status()

    def get_stats(self) -> Dict[str, Any]:
        now = self._clock()
        collections = {
            kind.value: {"total": repo.count(), "fresh": repo.count(fresh_only=True, now=now)}
            for kind, repo in self.repos.items()
        }
        return {
            "collections": collections,
            "total_entries": sum(c["total"] for c in collections.values()),
            "memory_entries": len(self.memory),
            "quota": self.quota.status(now),
            "spoonacular_configured": self.client.is_configured(),
        }

    def clear_expired(self) -> Dict[str, Any]:
        now = self._clock()
        removed = {kind.value: repo.delete_expired(now) for kind, repo in self.repos.items()}
        memory_removed = self.memory.purge_expired()
        self.limiter.cleanup()
        logger.info(f"cache_cleared_expired database={sum(removed.values())} memory={memory_removed}")
        return {"database": removed, "memory": memory_removed}

    def clear_memory(self) -> int:
        return self.memory.clear()

    def warmup(self, number: int = SpoonacularClient.DEFAULT_NUMBER) -> Dict[str, Any]:
        """Pre-fill the popular recipes entry."""
        result = self.get_popular_recipes(number=number)
        count = len(result.data or [])
        logger.info(f"cache_warmup source={result.source} recipes={count}")
        return {"popular": count, "source": result.source, "quota_exceeded": result.quota_exceeded}

    def import_cached_recipes(self, path: str) -> Dict[str, int]:
        """
        Load raw Spoonacular recipe payloads from a JSON file into the recipe cache.

        The file holds either a list of recipes or {"recipes": [...]}. Recipes
        already cached are skipped; entries without an integer id count as errors.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise ServiceValidationError(f"File not found: {path}")
        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except ValueError as exc:
            raise ServiceValidationError(f"Invalid JSON in {path}: {exc}")
        recipes: List[Any] = payload.get("recipes", []) if isinstance(payload, dict) else payload
        if not isinstance(recipes, list):
            raise ServiceValidationError("Expected a list of recipes")

        repo = self.repos[CacheKind.RECIPE]
        now = self._clock()
        imported = skipped = errors = 0
        valid = []
        for raw in recipes:
            spoonacular_id = RecipeMapper.parse_external_id(raw.get("id")) if isinstance(raw, dict) else None
            if spoonacular_id is None:
                errors += 1
                continue
            valid.append((spoonacular_id, raw))

        cached = repo.existing_keys([helpers.recipe_cache_key(sid) for sid, _ in valid])
        for spoonacular_id, raw in valid:
            key = helpers.recipe_cache_key(spoonacular_id)
            if key in cached:
                skipped += 1
                continue
            cached.add(key)
            repo.upsert(
                key, raw, self.ttls[CacheKind.RECIPE], self.stale_window, now=now,
                spoonacular_id=spoonacular_id,
            )
            imported += 1
        logger.info(f"cache_import path={path} imported={imported} skipped={skipped} errors={errors}")
        return {"imported": imported, "skipped": skipped, "errors": errors}


_service: Optional[RecipeCacheService] = None


def get_cache_service() -> RecipeCacheService:
    """Process-wide cache service wired to MongoDB, Spoonacular and the shared limiter."""
    global _service
    if _service is None:
        _service = RecipeCacheService(
            mongo_adapter.get_db(),
            spoonacular_adapter.get_client(),
            spoonacular_rate_limiter,
        )
    return _service


def reset_cache_service() -> None:
    global _service
    _service = None
