from typing import Any, Dict, List, Optional
import logging

from app.exceptions import ExternalServiceError, RateLimitExceededError, ServiceValidationError
from adapters import vision_adapter
from core.rate_limiter import RateLimiter, upload_rate_limiter
from core.utils.helpers import categorize_ingredient, normalize_text
from domain.mappers.recipe_mapper import RecipeMapper
from repositories import RecipeRepository
from services.recipe_cache_service import RecipeCacheService

logger = logging.getLogger("smartplates.ai")

FAILURE_TIPS = [
    "We could not recognise ingredients in this photo.",
    "Try a well lit photo taken straight into the fridge.",
    "You can also type your ingredients into the recipe search.",
]


def _mentions_allergen(suggestion: Dict[str, Any], allergies: List[str]) -> bool:
    haystack = " ".join(
        [suggestion.get("title", "")]
        + suggestion.get("used_ingredients", [])
        + suggestion.get("missing_ingredients", [])
    ).lower()
    return any(a and a in haystack for a in allergies)


def _suggestion(raw: Dict[str, Any]) -> Dict[str, Any]:
    used = [i.get("name", "") for i in raw.get("usedIngredients") or []]
    missing = [i.get("name", "") for i in raw.get("missedIngredients") or []]
    total = len(used) + len(missing)
    return {
        "id": RecipeMapper.external_id(raw["id"]),
        "spoonacular_id": raw["id"],
        "title": raw.get("title", ""),
        "image": raw.get("image"),
        "used_ingredients": used,
        "missing_ingredients": missing,
        "match_percentage": round(100 * len(used) / total) if total else 0,
        "likes": raw.get("likes", 0),
    }


def _tips(ingredients: List[Dict[str, Any]], suggestions: List[Dict[str, Any]]) -> List[str]:
    tips = []
    categories = {i["category"] for i in ingredients}
    if "Produce" in categories:
        tips.append("Use fresh produce first, it spoils fastest.")
    if "Meat & Seafood" in categories:
        tips.append("Cook or freeze raw meat and fish within two days.")
    if "Dairy & Eggs" in categories:
        tips.append("Check dairy dates and use opened items first.")
    if suggestions and suggestions[0]["missing_ingredients"]:
        tips.append(
            f"Pick up {', '.join(suggestions[0]['missing_ingredients'][:3])} "
            f"to make {suggestions[0]['title']}."
        )
    if not suggestions:
        tips.append("No matching recipes found; try adding pantry staples.")
    return tips


class AIService:
    """AI search, fridge photo analysis and recipe idea generation"""

    @staticmethod
    def analyze_fridge(
        image_data: str,
        preferences: Optional[Dict[str, Any]],
        cache: RecipeCacheService,
        client_key: str = "global",
        limiter: RateLimiter = upload_rate_limiter,
    ) -> Dict[str, Any]:
        check = limiter.check(f"fridge:{client_key}")
        if not check.allowed:
            raise RateLimitExceededError(
                "Too many fridge analyses, try again later", retry_after=check.retry_after
            )

        preferences = preferences or {}
        allergies = [normalize_text(a) for a in preferences.get("allergies") or []]

        try:
            extracted = vision_adapter.extract_ingredients(image_data)
        except ExternalServiceError as exc:
            logger.warning(f"fridge_analysis_failed client={client_key} error={exc}")
            return {"ingredients": [], "suggestions": [], "tips": list(FAILURE_TIPS), "model": None}

        ingredients = [
            {
                "name": name,
                "confidence": 0.9,
                "category": categorize_ingredient(name),
                "freshness": "unknown",
            }
            for name in extracted["ingredients"]
        ]
        if not ingredients:
            return {"ingredients": [], "suggestions": [], "tips": list(FAILURE_TIPS), "model": extracted["model"]}

        suggestions: List[Dict[str, Any]] = []
        try:
            result = cache.search_by_ingredients([i["name"] for i in ingredients])
            for raw in result.data or []:
                if not raw.get("id"):
                    continue
                suggestion = _suggestion(raw)
                if allergies and _mentions_allergen(suggestion, allergies):
                    continue
                suggestions.append(suggestion)
        except ExternalServiceError as exc:
            logger.warning(f"fridge_suggestions_unavailable error={exc}")

        suggestions.sort(key=lambda s: s["match_percentage"], reverse=True)
        logger.info(
            f"fridge_analyzed client={client_key} ingredients={len(ingredients)} suggestions={len(suggestions)}"
        )
        return {
            "ingredients": ingredients,
            "suggestions": suggestions,
            "tips": _tips(ingredients, suggestions),
            "model": extracted["model"],
        }

    @staticmethod
    def search(db, filters: Dict[str, Any], page: int = 1, limit: int = 12, randomize: bool = False) -> Dict[str, Any]:
        """Search only recipes that can actually be cooked (ingredients and instructions)."""
        docs, total = RecipeRepository(db).search(
            {**filters, "require_instructions": True, "published_only": True}, page, limit, randomize
        )
        return {
            "recipes": [RecipeMapper.to_public(d) for d in docs],
            "total": total,
            "page": page,
            "limit": limit,
        }

    @staticmethod
    def generate_recipes(
        ingredients: List[str],
        dietary_preferences: Optional[List[str]] = None,
        cooking_time: int = 30,
        count: int = 4,
    ) -> List[Dict[str, Any]]:
        cleaned = [i.strip() for i in ingredients or [] if i and i.strip()]
        if not cleaned:
            raise ServiceValidationError("At least one ingredient is required")
        ideas = vision_adapter.generate_recipe_ideas(cleaned, dietary_preferences, cooking_time, count)
        logger.info(f"recipes_generated ingredients={len(cleaned)} count={len(ideas)}")
        return [{**idea, "source": "ai"} for idea in ideas]
