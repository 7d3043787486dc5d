"""
Domain enums for SmartPlates application.
Contains all enumeration types used across the domain models.
"""

import enum


class UserRole(str, enum.Enum):
    """Access level of an account"""

    USER = "user"
    ADMIN = "admin"


class MealType(str, enum.Enum):
    """Meal slots of a planned day"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"


class RecipeSource(str, enum.Enum):
    """Where a recipe document came from"""

    USER = "user"
    SPOONACULAR = "spoonacular"
    AI = "ai"


class Difficulty(str, enum.Enum):
    """Recipe difficulty, derived from ready-in minutes"""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class CacheKind(str, enum.Enum):
    """Spoonacular responses cached in their own collections"""

    SEARCH = "search"
    RECIPE = "recipe"
    INGREDIENTS = "ingredients"
    RANDOM = "random"
    NUTRITION = "nutrition"


class QuotaEndpoint(str, enum.Enum):
    """Per-endpoint counters kept on the daily quota document"""

    COMPLEX_SEARCH = "complex_search"
    RECIPE_INFORMATION = "recipe_information"
    FIND_BY_INGREDIENTS = "find_by_ingredients"
    RANDOM = "random"
    NUTRITION = "nutrition"


class ContactStatus(str, enum.Enum):
    NEW = "new"
    READ = "read"
    ANSWERED = "answered"
