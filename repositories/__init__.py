"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository
from repositories.recipe_repository import RecipeRepository, DedupeSummary
from repositories.meal_plan_repository import MealPlanRepository
from repositories.grocery_repository import (
    GroceryListRepository,
    SavedGroceryListRepository,
)
from repositories.interaction_repository import InteractionRepository
from repositories.contact_repository import ContactRepository
from repositories.cache_repository import ApiCacheRepository, QuotaRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RecipeRepository",
    "DedupeSummary",
    "MealPlanRepository",
    "GroceryListRepository",
    "SavedGroceryListRepository",
    "InteractionRepository",
    "ContactRepository",
    "ApiCacheRepository",
    "QuotaRepository",
]
