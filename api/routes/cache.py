"""Spoonacular cache and quota routes"""

from fastapi import APIRouter, Depends, Query
import logging

from api.dependencies import get_cache, require_admin
from services.recipe_cache_service import RecipeCacheService

router = APIRouter(prefix="/cache/spoonacular", tags=["Cache"])
logger = logging.getLogger("smartplates.api.cache")


@router.get("/stats")
def cache_stats(cache: RecipeCacheService = Depends(get_cache)):
    return cache.get_stats()


@router.get("/quota")
def cache_quota(cache: RecipeCacheService = Depends(get_cache)):
    return cache.get_quota_status()


@router.post("/clear-expired", dependencies=[Depends(require_admin)])
def clear_expired(cache: RecipeCacheService = Depends(get_cache)):
    """Delete cache entries past their stale window and purge the memory layer."""
    return cache.clear_expired()


@router.post("/warmup", dependencies=[Depends(require_admin)])
def warmup(
    number: int = Query(default=12, ge=1, le=100),
    cache: RecipeCacheService = Depends(get_cache),
):
    return cache.warmup(number)
