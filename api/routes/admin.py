"""Administrator routes"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from api.dependencies import get_cache, get_db, require_admin
from api.responses import success_response
from domain.schemas.misc_schemas import ImportCachedRecipesRequest
from domain.schemas.user_schemas import ActiveToggleRequest, PasswordResetRequest, UserResponse
from repositories import RecipeRepository
from services.admin_service import AdminService
from services.recipe_cache_service import RecipeCacheService
from services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger("smartplates.api.admin")


@router.get("/stats")
def admin_stats(db=Depends(get_db), cache: RecipeCacheService = Depends(get_cache)):
    return AdminService.stats(db, cache)


@router.get("/users")
def admin_list_users(
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    db=Depends(get_db),
):
    return UserService.list_users(db, page, limit, search)


@router.patch("/users/{user_id}/active", response_model=UserResponse)
def admin_set_active(
    user_id: str,
    body: ActiveToggleRequest,
    admin=Depends(require_admin),
    db=Depends(get_db),
):
    return UserService.set_active(db, user_id, body.is_active, acting_user_id=str(admin["_id"]))


@router.post("/users/{user_id}/reset-password")
def admin_reset_password(user_id: str, body: PasswordResetRequest, db=Depends(get_db)):
    UserService.reset_password(db, user_id, body.new_password)
    return success_response(message="Password reset")


@router.post("/recipes/dedupe")
def dedupe_recipes(db=Depends(get_db)):
    """Remove duplicate Spoonacular mirrors and (re)create the unique index."""
    summary = RecipeRepository(db).ensure_unique_index_and_dedupe(force=True)
    logger.info(f"admin_dedupe removed={summary.removed}")
    return summary.to_dict()


@router.post("/import-cached-recipes")
def import_cached_recipes(body: ImportCachedRecipesRequest, cache: RecipeCacheService = Depends(get_cache)):
    """Load a JSON file of raw Spoonacular recipes into the recipe cache."""
    return cache.import_cached_recipes(body.path)
