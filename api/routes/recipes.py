"""
Recipe routes - search, authoring, Spoonacular import and interactions.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Any, Dict, Optional
import logging

from api.dependencies import (
    get_cache,
    get_current_user,
    get_db,
    get_optional_user,
    rate_limit,
    search_rate_limit,
)
from domain.schemas.misc_schemas import ReviewCreate
from domain.schemas.recipe_schemas import (
    ImportSpoonacularRequest,
    RecipeCreate,
    RecipeUpdate,
)
from services.interaction_service import InteractionService
from services.recipe_cache_service import RecipeCacheService
from services.recipe_service import RecipeService

router = APIRouter(prefix="/recipes", tags=["Recipes"], dependencies=[Depends(rate_limit)])
logger = logging.getLogger("smartplates.api.recipes")


@router.get("", response_model=Dict[str, Any])
def search_recipes(
    query: Optional[str] = Query(default=None, alias="q", description="Title, description or ingredients"),
    type: Optional[str] = Query(default=None, description="Dish type"),
    cuisine: Optional[str] = Query(default=None),
    diet: Optional[str] = Query(default=None),
    intolerances: Optional[str] = Query(default=None, description="Comma-separated"),
    difficulty: Optional[str] = Query(default=None, pattern="^(easy|medium|hard)$"),
    max_ready_time: Optional[int] = Query(default=None, ge=1),
    author_id: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=30, ge=1, le=100),
    random: bool = Query(default=False),
    db=Depends(get_db),
    cache: RecipeCacheService = Depends(get_cache),
):
    """
    Search recipes.

    Local recipes are searched first. When nothing matches a text query the
    search falls back to Spoonacular (through the cache) and mirrors the results.
    """
    filters = {
        "query": query,
        "type": type,
        "cuisine": cuisine,
        "diet": diet,
        "intolerances": intolerances,
        "difficulty": difficulty,
        "max_ready_time": max_ready_time,
        "author_id": author_id,
    }
    return RecipeService.search(db, filters, page=page, limit=limit, randomize=random, cache=cache)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_recipe(body: RecipeCreate, user=Depends(get_current_user), db=Depends(get_db)):
    return RecipeService.create_recipe(db, body, user)


@router.get("/count")
def count_recipes(source: Optional[str] = Query(default=None), db=Depends(get_db)):
    return RecipeService.count(db, source)


@router.get("/resolve-id")
def resolve_recipe_id(id: str = Query(..., min_length=1), db=Depends(get_db)):
    """Map spoonacular-<n> to the id of its local copy, if one exists."""
    return RecipeService.resolve_id(db, id)


@router.get("/search-spoonacular", dependencies=[Depends(search_rate_limit)])
def search_spoonacular(
    query: str = Query(..., alias="q", min_length=1),
    type: Optional[str] = Query(default=None),
    cuisine: Optional[str] = Query(default=None),
    diet: Optional[str] = Query(default=None),
    number: int = Query(default=12, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    cache: RecipeCacheService = Depends(get_cache),
):
    filters = {"type": type, "cuisine": cuisine, "diet": diet, "number": number, "offset": offset}
    return RecipeService.search_spoonacular(cache, query, {k: v for k, v in filters.items() if v is not None})


@router.post("/import-spoonacular", status_code=status.HTTP_201_CREATED)
def import_spoonacular(
    body: ImportSpoonacularRequest,
    response: Response,
    user=Depends(get_current_user),
    db=Depends(get_db),
    cache: RecipeCacheService = Depends(get_cache),
):
    """Save a Spoonacular recipe as a local recipe; 200 when it was already imported."""
    recipe, created = RecipeService.import_spoonacular(db, body.spoonacular_id, user, cache)
    if not created:
        response.status_code = status.HTTP_200_OK
    return recipe


@router.get("/{recipe_id}")
def get_recipe(
    recipe_id: str,
    db=Depends(get_db),
    cache: RecipeCacheService = Depends(get_cache),
):
    """Get a recipe by local id or spoonacular-<n>."""
    return RecipeService.get_recipe(db, recipe_id, cache)


@router.put("/{recipe_id}")
def update_recipe(recipe_id: str, body: RecipeUpdate, user=Depends(get_current_user), db=Depends(get_db)):
    return RecipeService.update_recipe(db, recipe_id, body, user)


@router.delete("/{recipe_id}")
def delete_recipe(recipe_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    RecipeService.delete_recipe(db, recipe_id, user)
    return {"status": "ok", "deleted": recipe_id}


@router.get("/{recipe_id}/nutrition")
def recipe_nutrition(
    recipe_id: str,
    db=Depends(get_db),
    cache: RecipeCacheService = Depends(get_cache),
):
    return RecipeService.get_nutrition(db, recipe_id, cache)


# ------------------ Interactions ------------------
@router.post("/{recipe_id}/like")
def toggle_like(recipe_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return InteractionService.toggle_like(db, recipe_id, str(user["_id"]))


@router.get("/{recipe_id}/reviews")
def list_reviews(
    recipe_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db=Depends(get_db),
):
    return InteractionService.list_reviews(db, recipe_id, page, limit)


@router.post("/{recipe_id}/reviews", status_code=status.HTTP_201_CREATED)
def submit_review(recipe_id: str, body: ReviewCreate, user=Depends(get_current_user), db=Depends(get_db)):
    return InteractionService.submit_review(db, recipe_id, user, body.rating, body.comment)


@router.delete("/{recipe_id}/reviews")
def delete_review(recipe_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return InteractionService.delete_review(db, recipe_id, user)


@router.get("/{recipe_id}/interactions")
def recipe_interactions(recipe_id: str, user=Depends(get_optional_user), db=Depends(get_db)):
    """Likes, rating summary and, with X-User-Id, the caller's own like/review."""
    return InteractionService.user_summary(db, recipe_id, str(user["_id"]) if user else None)
