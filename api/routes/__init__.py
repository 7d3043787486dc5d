"""API routes package"""

from . import admin, ai, auth, cache, categories, contact, grocery, health, meal_plans, recipes, users

__all__ = [
    "admin",
    "ai",
    "auth",
    "cache",
    "categories",
    "contact",
    "grocery",
    "health",
    "meal_plans",
    "recipes",
    "users",
]
