"""Services package - Business logic layer"""

from services.quota_service import QuotaService
from services.recipe_cache_service import RecipeCacheService, get_cache_service
from services.recipe_service import RecipeService
from services.ai_service import AIService
from services.interaction_service import InteractionService
from services.user_service import UserService
from services.meal_plan_service import MealPlanService
from services.grocery_service import GroceryService
from services.admin_service import AdminService
from services.contact_service import ContactService

__all__ = [
    "QuotaService",
    "RecipeCacheService",
    "get_cache_service",
    "RecipeService",
    "AIService",
    "InteractionService",
    "UserService",
    "MealPlanService",
    "GroceryService",
    "AdminService",
    "ContactService",
]
