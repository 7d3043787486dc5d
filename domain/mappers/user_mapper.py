"""
User domain mappers.
Handles transformation between stored user documents and API responses.
"""

from typing import Any, Dict

from domain.schemas.user_schemas import UserResponse


class UserMapper:
    """Mapper for user-related transformations."""

    @staticmethod
    def to_response(user: Dict[str, Any]) -> UserResponse:
        """
        Convert a user document to UserResponse DTO.

        The password hash is never copied.

        Args:
            user: user document as stored in MongoDB

        Returns:
            UserResponse DTO with all public user data
        """
        return UserResponse(
            id=str(user["_id"]),
            email=user["email"],
            name=user.get("name") or "",
            role=user.get("role") or "user",
            avatar=user.get("avatar"),
            bio=user.get("bio"),
            is_active=user.get("is_active", True),
            is_email_verified=user.get("is_email_verified", False),
            dietary_restrictions=user.get("dietary_restrictions") or [],
            favorite_categories=user.get("favorite_categories") or [],
            saved_recipes=[str(r) for r in user.get("saved_recipes") or []],
            created_recipes=[str(r) for r in user.get("created_recipes") or []],
            liked_recipes=[str(r) for r in user.get("liked_recipes") or []],
            last_login_at=user.get("last_login_at"),
            created_at=user.get("created_at"),
            updated_at=user.get("updated_at"),
        )

    @staticmethod
    def to_summary(user: Dict[str, Any]) -> Dict[str, Any]:
        """Compact form used in admin listings."""
        return {
            "id": str(user["_id"]),
            "email": user["email"],
            "name": user.get("name") or "",
            "role": user.get("role") or "user",
            "is_active": user.get("is_active", True),
            "created_recipes_count": len(user.get("created_recipes") or []),
            "last_login_at": user.get("last_login_at"),
            "created_at": user.get("created_at"),
        }
