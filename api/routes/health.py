"""Health check and status routes"""

from fastapi import APIRouter, Depends
import logging

from adapters import mongo_adapter
from api.dependencies import get_cache
from api.responses import HealthResponse, StatusResponse
from app.config import settings
from services.recipe_cache_service import RecipeCacheService

router = APIRouter(tags=["Health"])
logger = logging.getLogger("smartplates.api.health")


@router.get("/health-check", response_model=HealthResponse)
def health_check():
    """Basic health check endpoint"""
    return HealthResponse(status="ok", service="SmartPlates", version=settings.app_version)


@router.get("/status", response_model=StatusResponse)
def service_status(cache: RecipeCacheService = Depends(get_cache)):
    """Report MongoDB reachability, Spoonacular configuration and today's quota."""
    mongo_ok = mongo_adapter.ping()
    quota = None
    if mongo_ok:
        try:
            quota = cache.get_quota_status()
        except Exception:
            logger.exception("Error reading Spoonacular quota status")
    return StatusResponse(
        status="ok" if mongo_ok else "degraded",
        service="SmartPlates",
        version=settings.app_version,
        mongodb=mongo_ok,
        spoonacular_configured=cache.client.is_configured(),
        quota=quota,
    )
