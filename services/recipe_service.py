from typing import Any, Dict, List, Optional, Tuple
import logging

from app.config import settings
from app.exceptions import (
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    RateLimitExceededError,
)
from adapters.mongo_adapter import to_object_id
from core.rate_limiter import RateLimiter, upload_rate_limiter
from domain.enums import RecipeSource, UserRole
from domain.mappers.recipe_mapper import RecipeMapper
from domain.schemas.recipe_schemas import RecipeCreate, RecipeUpdate
from repositories import RecipeRepository, UserRepository
from services.recipe_cache_service import RecipeCacheService

logger = logging.getLogger("smartplates.recipe")

# Local search filter name -> Spoonacular complexSearch parameter
_SPOONACULAR_PARAMS = {
    "type": "type",
    "diet": "diet",
    "intolerances": "intolerances",
    "cuisine": "cuisine",
    "max_ready_time": "maxReadyTime",
}


def _owner_or_admin(recipe: Dict[str, Any], user: Dict[str, Any]) -> None:
    if user.get("role") == UserRole.ADMIN.value:
        return
    if recipe.get("author_id") != str(user["_id"]):
        raise ForbiddenError("Only the author or an admin can change this recipe")


class RecipeService:
    """Recipe search, retrieval and authoring"""

    @staticmethod
    def search(
        db,
        filters: Dict[str, Any],
        page: int = 1,
        limit: int = 30,
        randomize: bool = False,
        cache: Optional[RecipeCacheService] = None,
    ) -> Dict[str, Any]:
        """
        Search local recipes first; when nothing matches a text query, fall back
        to Spoonacular through the cache and mirror the results locally.

        Returns {recipes, total, page, limit, source, notice} where source is
        mongodb | spoonacular | fallback-needed | quota-exceeded.
        """
        repo = RecipeRepository(db)
        docs, total = repo.search({**filters, "published_only": True}, page, limit, randomize)
        response = {
            "recipes": [RecipeMapper.to_public(d) for d in docs],
            "total": total,
            "page": page,
            "limit": limit,
            "source": "mongodb",
            "notice": None,
        }
        query = (filters.get("query") or "").strip()
        if docs or not query:
            return response

        if cache is None or not settings.spoonacular_enabled or not cache.client.is_configured():
            response["source"] = "fallback-needed"
            response["notice"] = "No local recipes matched and the external recipe source is unavailable"
            return response

        spoon_filters = {
            param: filters[name]
            for name, param in _SPOONACULAR_PARAMS.items()
            if filters.get(name) not in (None, "")
        }
        spoon_filters["number"] = limit
        spoon_filters["offset"] = (max(page, 1) - 1) * limit

        try:
            result = cache.search_recipes(query, spoon_filters)
        except ExternalServiceError as exc:
            logger.warning(f"spoonacular_fallback_failed query={query!r} error={exc}")
            response["source"] = "fallback-needed"
            response["notice"] = "The external recipe source is temporarily unavailable"
            return response

        results = (result.data or {}).get("results", [])
        if result.quota_exceeded and not results:
            response["source"] = "quota-exceeded"
            response["notice"] = "Daily recipe API limit reached; only local recipes are available"
            return response

        mirrored = []
        for raw in results:
            try:
                doc = repo.upsert_external(RecipeMapper.from_spoonacular(raw))
            except (KeyError, TypeError, ValueError):
                logger.warning(f"spoonacular_result_skipped id={raw.get('id')}")
                continue
            mirrored.append(RecipeMapper.to_public(doc))

        logger.info(f"spoonacular_fallback query={query!r} results={len(mirrored)} source={result.source}")
        response.update(
            recipes=mirrored,
            total=int((result.data or {}).get("totalResults", len(mirrored))),
            source=RecipeSource.SPOONACULAR.value,
            notice="Showing cached external results" if result.stale else None,
        )
        return response

    @staticmethod
    def search_spoonacular(cache: RecipeCacheService, query: str, filters: Dict[str, Any]) -> Dict[str, Any]:
        """Direct cached Spoonacular search without mirroring (admin/browse use)."""
        result = cache.search_recipes(query, filters)
        data = result.data or {}
        return {
            "results": [RecipeMapper.from_search_result(r) for r in data.get("results", []) if r.get("id")],
            "total": data.get("totalResults", 0),
            "source": result.source,
            "stale": result.stale,
            "quota_exceeded": result.quota_exceeded,
        }

    @staticmethod
    def get_recipe(db, recipe_id: str, cache: Optional[RecipeCacheService] = None) -> Dict[str, Any]:
        """Get a recipe by local ObjectId or by ``spoonacular-<n>``."""
        repo = RecipeRepository(db)
        if to_object_id(recipe_id) is not None:
            doc = repo.get_by_id(recipe_id)
            if doc:
                return RecipeMapper.to_public(doc)

        spoonacular_id = RecipeMapper.parse_external_id(recipe_id)
        if spoonacular_id is None:
            raise NotFoundError(f"Recipe {recipe_id} not found")

        mirror = repo.get_by_spoonacular_id(spoonacular_id)
        if mirror:
            return RecipeMapper.to_public(mirror)

        if cache is None:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        result = cache.get_recipe(spoonacular_id)
        if not result.data:
            if result.quota_exceeded:
                raise QuotaExceededError("Recipe is not cached and the daily API quota is used up")
            raise NotFoundError(f"Recipe {recipe_id} not found")
        doc = repo.upsert_external(RecipeMapper.from_spoonacular(result.data))
        return RecipeMapper.to_public(doc)

    @staticmethod
    def get_nutrition(db, recipe_id: str, cache: RecipeCacheService) -> Dict[str, Any]:
        recipe = RecipeService.get_recipe(db, recipe_id, cache)
        if recipe.get("nutrition") and recipe["nutrition"].get("nutrients"):
            return {"recipe_id": recipe["id"], "nutrition": recipe["nutrition"], "source": "recipe"}
        if not recipe.get("spoonacular_id"):
            raise NotFoundError(f"No nutrition data for recipe {recipe_id}")
        result = cache.get_nutrition(recipe["spoonacular_id"])
        if not result.data:
            raise NotFoundError(f"No nutrition data for recipe {recipe_id}")
        return {"recipe_id": recipe["id"], "nutrition": result.data, "source": result.source}

    @staticmethod
    def create_recipe(
        db,
        data: RecipeCreate,
        user: Dict[str, Any],
        limiter: RateLimiter = upload_rate_limiter,
    ) -> Dict[str, Any]:
        user_id = str(user["_id"])
        check = limiter.check(user_id)
        if not check.allowed:
            raise RateLimitExceededError(
                "Too many recipe uploads, try again later", retry_after=check.retry_after
            )

        doc = data.model_dump()
        doc.update(
            {
                "author_id": user_id,
                "author_name": user.get("name"),
                "source": RecipeSource.USER.value,
                "rating": 0,
                "ratings_count": 0,
                "likes_count": 0,
                "is_pending": False,
                "moderation_notes": None,
            }
        )
        created = RecipeRepository(db).create(doc)
        UserRepository(db).add_created_recipe(user_id, str(created["_id"]))
        logger.info(f"recipe_created recipe_id={created['_id']} author_id={user_id}")
        return RecipeMapper.to_public(created)

    @staticmethod
    def update_recipe(db, recipe_id: str, changes: RecipeUpdate, user: Dict[str, Any]) -> Dict[str, Any]:
        repo = RecipeRepository(db)
        recipe = repo.get_by_id(recipe_id)
        if not recipe:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        _owner_or_admin(recipe, user)
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            return RecipeMapper.to_public(recipe)
        updated = repo.update(recipe_id, fields)
        logger.info(f"recipe_updated recipe_id={recipe_id} fields={sorted(fields)}")
        return RecipeMapper.to_public(updated)

    @staticmethod
    def delete_recipe(db, recipe_id: str, user: Dict[str, Any]) -> bool:
        repo = RecipeRepository(db)
        recipe = repo.get_by_id(recipe_id)
        if not recipe:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        _owner_or_admin(recipe, user)
        repo.delete(recipe_id)
        if recipe.get("author_id"):
            UserRepository(db).remove_created_recipe(recipe["author_id"], str(recipe["_id"]))
        logger.info(f"recipe_deleted recipe_id={recipe_id}")
        return True

    @staticmethod
    def import_spoonacular(
        db, spoonacular_id: int, user: Dict[str, Any], cache: RecipeCacheService
    ) -> Tuple[Dict[str, Any], bool]:
        """Save a Spoonacular recipe locally; returns (recipe, created_flag)."""
        repo = RecipeRepository(db)
        existing = repo.get_by_spoonacular_id(spoonacular_id)
        if existing:
            return RecipeMapper.to_public(existing), False

        result = cache.get_recipe(spoonacular_id)
        if not result.data:
            if result.quota_exceeded:
                raise QuotaExceededError("Recipe is not cached and the daily API quota is used up")
            raise NotFoundError(f"Spoonacular recipe {spoonacular_id} not found")

        user_id = str(user["_id"])
        doc = repo.upsert_external(
            RecipeMapper.from_spoonacular(result.data),
            author={"id": user_id, "name": user.get("name")},
        )
        UserRepository(db).add_created_recipe(user_id, str(doc["_id"]))
        logger.info(f"recipe_imported spoonacular_id={spoonacular_id} user_id={user_id}")
        return RecipeMapper.to_public(doc), True

    @staticmethod
    def resolve_id(db, recipe_id: str) -> Dict[str, Any]:
        """Map any recipe id (local or spoonacular-<n>) to the local document id."""
        repo = RecipeRepository(db)
        if to_object_id(recipe_id) is not None and repo.exists(recipe_id):
            return {"id": recipe_id, "local_id": recipe_id, "spoonacular_id": None}
        spoonacular_id = RecipeMapper.parse_external_id(recipe_id)
        mirror = repo.get_by_spoonacular_id(spoonacular_id) if spoonacular_id is not None else None
        return {
            "id": recipe_id,
            "local_id": str(mirror["_id"]) if mirror else None,
            "spoonacular_id": spoonacular_id,
        }

    @staticmethod
    def count(db, source: Optional[str] = None) -> Dict[str, Any]:
        repo = RecipeRepository(db)
        by_source = repo.count_by_source()
        if source:
            return {"source": source, "count": by_source.get(source, 0)}
        return {"count": sum(by_source.values()), "by_source": by_source}

    @staticmethod
    def categories(db) -> Dict[str, List[str]]:
        repo = RecipeRepository(db)
        return {
            "cuisines": repo.distinct_values("cuisines"),
            "dish_types": repo.distinct_values("dish_types"),
            "diets": repo.distinct_values("diets"),
        }
