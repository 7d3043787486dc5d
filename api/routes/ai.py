"""AI routes: fridge photo analysis, recipe ideas and AI recipe search"""

from fastapi import APIRouter, Depends, Query, Request
from typing import Optional
import logging

from api.dependencies import client_key, get_cache, get_db, rate_limit, search_rate_limit
from domain.schemas.misc_schemas import AnalyzeFridgeRequest, GenerateRecipesRequest
from services.ai_service import AIService
from services.recipe_cache_service import RecipeCacheService

router = APIRouter(prefix="/ai", tags=["AI"], dependencies=[Depends(rate_limit)])
logger = logging.getLogger("smartplates.api.ai")


@router.post("/analyze-fridge")
def analyze_fridge(
    body: AnalyzeFridgeRequest,
    request: Request,
    cache: RecipeCacheService = Depends(get_cache),
):
    """
    Recognise ingredients in a fridge photo and suggest recipes.

    Failures of the vision model come back as an empty ingredient list with tips.
    """
    preferences = body.preferences.model_dump() if body.preferences else None
    return AIService.analyze_fridge(body.image_data, preferences, cache, client_key=client_key(request))


@router.post("/generate-recipes", dependencies=[Depends(search_rate_limit)])
def generate_recipes(body: GenerateRecipesRequest):
    recipes = AIService.generate_recipes(
        body.ingredients, body.dietary_preferences, body.cooking_time, body.count
    )
    return {"recipes": recipes, "count": len(recipes)}


@router.get("/search-recipes", dependencies=[Depends(search_rate_limit)])
def ai_search_recipes(
    query: Optional[str] = Query(default=None, alias="q"),
    type: Optional[str] = Query(default=None),
    diet: Optional[str] = Query(default=None),
    intolerances: Optional[str] = Query(default=None),
    max_ready_time: Optional[int] = Query(default=None, ge=1),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
    random: bool = Query(default=False),
    db=Depends(get_db),
):
    filters = {
        "query": query,
        "type": type,
        "diet": diet,
        "intolerances": intolerances,
        "max_ready_time": max_ready_time,
    }
    return AIService.search(db, filters, page=page, limit=limit, randomize=random)
