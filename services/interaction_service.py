from typing import Any, Dict, Optional
import logging

from app.exceptions import NotFoundError, ServiceValidationError
from domain.mappers.recipe_mapper import RecipeMapper
from repositories import InteractionRepository, RecipeRepository, UserRepository

logger = logging.getLogger("smartplates.interactions")

MIN_COMMENT_LENGTH = 10


def _require_recipe(db, recipe_id: str) -> Dict[str, Any]:
    recipe = RecipeRepository(db).get_by_id(recipe_id)
    if not recipe:
        raise NotFoundError(f"Recipe {recipe_id} not found")
    return recipe


def _refresh_rating(db, recipe_id: str) -> Dict[str, Any]:
    ratings = InteractionRepository(db).ratings(recipe_id)
    average = round(sum(ratings) / len(ratings), 1) if ratings else 0
    RecipeRepository(db).set_rating(recipe_id, average, len(ratings))
    return {"average_rating": average, "total_ratings": len(ratings)}


class InteractionService:
    """Likes and reviews"""

    @staticmethod
    def toggle_like(db, recipe_id: str, user_id: str) -> Dict[str, Any]:
        recipe = _require_recipe(db, recipe_id)
        interactions = InteractionRepository(db)
        users = UserRepository(db)

        # mirrors seed likes_count from aggregateLikes; only adjust it
        delta = 0
        if interactions.has_liked(recipe_id, user_id):
            if interactions.remove_like(recipe_id, user_id):
                delta = -1
            users.remove_liked_recipe(user_id, recipe_id)
            liked = False
        else:
            if interactions.add_like(recipe_id, user_id):
                delta = 1
            users.add_liked_recipe(user_id, recipe_id)
            liked = True

        if delta:
            recipe = RecipeRepository(db).increment_likes(recipe_id, delta) or recipe
        total = int(recipe.get("likes_count") or 0)
        logger.info(f"recipe_like_toggled recipe_id={recipe_id} user_id={user_id} liked={liked} total={total}")
        return {"liked": liked, "total_likes": total}

    @staticmethod
    def submit_review(db, recipe_id: str, user: Dict[str, Any], rating: int, comment: str) -> Dict[str, Any]:
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ServiceValidationError("Rating must be between 1 and 5")
        comment = (comment or "").strip()
        if len(comment) < MIN_COMMENT_LENGTH:
            raise ServiceValidationError(f"Comment must be at least {MIN_COMMENT_LENGTH} characters")
        _require_recipe(db, recipe_id)

        review = InteractionRepository(db).upsert_review(
            recipe_id, {"id": str(user["_id"]), "name": user.get("name")}, rating, comment
        )
        summary = _refresh_rating(db, recipe_id)
        logger.info(f"review_saved recipe_id={recipe_id} user_id={user['_id']} rating={rating}")
        return {"review": RecipeMapper.to_public(review), **summary}

    @staticmethod
    def list_reviews(db, recipe_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        page = max(page, 1)
        docs, total = InteractionRepository(db).list_reviews(recipe_id, skip=(page - 1) * limit, limit=limit)
        return {
            "reviews": [RecipeMapper.to_public(d) for d in docs],
            "total": total,
            "page": page,
            "limit": limit,
        }

    @staticmethod
    def delete_review(db, recipe_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
        if not InteractionRepository(db).delete_review(recipe_id, str(user["_id"])):
            raise NotFoundError("Review not found")
        logger.info(f"review_deleted recipe_id={recipe_id} user_id={user['_id']}")
        return _refresh_rating(db, recipe_id)

    @staticmethod
    def rating_summary(db, recipe_id: str) -> Dict[str, Any]:
        ratings = InteractionRepository(db).ratings(recipe_id)
        distribution = {str(star): 0 for star in range(1, 6)}
        for value in ratings:
            distribution[str(value)] = distribution.get(str(value), 0) + 1
        return {
            "total_ratings": len(ratings),
            "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0,
            "distribution": distribution,
        }

    @staticmethod
    def user_summary(db, recipe_id: str, user_id: Optional[str]) -> Dict[str, Any]:
        interactions = InteractionRepository(db)
        recipe = RecipeRepository(db).get_by_id(recipe_id)
        summary = {
            "recipe_id": recipe_id,
            "total_likes": int(recipe.get("likes_count") or 0) if recipe else interactions.count_likes(recipe_id),
            "has_liked": False,
            "has_reviewed": False,
            "user_rating": None,
        }
        summary.update(InteractionService.rating_summary(db, recipe_id))
        if user_id:
            review = interactions.get_review(recipe_id, user_id)
            summary["has_liked"] = interactions.has_liked(recipe_id, user_id)
            summary["has_reviewed"] = review is not None
            summary["user_rating"] = review["rating"] if review else None
        return summary
