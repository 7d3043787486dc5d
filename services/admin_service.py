from datetime import datetime, timedelta
from typing import Any, Dict
import logging

from repositories import InteractionRepository, RecipeRepository, UserRepository
from services.recipe_cache_service import RecipeCacheService

logger = logging.getLogger("smartplates.admin")

ACTIVE_WINDOW = timedelta(days=30)
ONLINE_WINDOW = timedelta(hours=24)


class AdminService:
    """Dashboard numbers for administrators"""

    @staticmethod
    def stats(db, cache: RecipeCacheService) -> Dict[str, Any]:
        now = datetime.utcnow()
        users = UserRepository(db)
        recipes = RecipeRepository(db)
        by_source = recipes.count_by_source()
        result = {
            "users": {
                "total": users.count(),
                "active": users.count_active_since(now - ACTIVE_WINDOW),
                "online": users.count_active_since(now - ONLINE_WINDOW),
            },
            "recipes": {
                "total": sum(by_source.values()),
                "by_source": by_source,
                "pending": recipes.count_pending(),
            },
            "reviews": {"total": InteractionRepository(db).count_reviews()},
            "cache": cache.get_stats(),
            "quota": cache.get_quota_status(),
            "generated_at": now,
        }
        logger.info(f"admin_stats users={result['users']['total']} recipes={result['recipes']['total']}")
        return result
