"""
Domain mappers package.
Handles transformation between stored documents, external payloads and DTOs.
"""

from domain.mappers.user_mapper import UserMapper
from domain.mappers.recipe_mapper import RecipeMapper

__all__ = ["UserMapper", "RecipeMapper"]
