from typing import Any, Dict, List, Optional
import logging
import re

import bcrypt

from app.config import settings
from app.exceptions import (
    ForbiddenError,
    NotFoundError,
    ServiceValidationError,
    UnauthorizedError,
)
from domain.enums import UserRole
from domain.mappers.recipe_mapper import RecipeMapper
from domain.mappers.user_mapper import UserMapper
from domain.schemas.user_schemas import UserResponse, UserUpdate
from repositories import RecipeRepository, UserRepository

logger = logging.getLogger("smartplates.users")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def validate_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ServiceValidationError("Invalid email address")
    return email


def _validate_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ServiceValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ServiceValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def _require_user(db, user_id: str) -> Dict[str, Any]:
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


class UserService:
    """Accounts, profiles and saved recipes"""

    @staticmethod
    def register(
        db, name: str, email: str, password: str, confirm_password: Optional[str] = None
    ) -> UserResponse:
        email = validate_email(email)
        _validate_password(password)
        if confirm_password is not None and confirm_password != password:
            raise ServiceValidationError("Passwords do not match")
        if not (name or "").strip():
            raise ServiceValidationError("Name is required")

        role = UserRole.ADMIN.value if email in settings.admin_emails else UserRole.USER.value
        user = UserRepository(db).create_user(email, name, hash_password(password), role)
        logger.info(f"user_registered user_id={user['_id']} role={role}")
        return UserMapper.to_response(user)

    @staticmethod
    def authenticate(db, email: str, password: str) -> UserResponse:
        repo = UserRepository(db)
        user = repo.get_by_email(email)
        if not user or not verify_password(password or "", user.get("password")):
            logger.warning("login_failed reason=bad_credentials")
            raise UnauthorizedError("Invalid email or password")
        if not user.get("is_active", True):
            logger.warning(f"login_failed user_id={user['_id']} reason=inactive")
            raise UnauthorizedError("Account is deactivated")
        user = repo.touch_login(user["_id"]) or user
        logger.info(f"user_logged_in user_id={user['_id']}")
        return UserMapper.to_response(user)

    @staticmethod
    def get_profile(db, user_id: str) -> UserResponse:
        return UserMapper.to_response(_require_user(db, user_id))

    @staticmethod
    def update_profile(db, user_id: str, changes: UserUpdate) -> UserResponse:
        _require_user(db, user_id)
        fields = changes.model_dump(exclude_unset=True)
        if "name" in fields and fields["name"] is not None:
            fields["name"] = fields["name"].strip()
        if not fields:
            return UserService.get_profile(db, user_id)
        user = UserRepository(db).update_user(user_id, fields)
        logger.info(f"profile_updated user_id={user_id} fields={sorted(fields)}")
        return UserMapper.to_response(user)

    @staticmethod
    def change_password(db, user_id: str, current_password: str, new_password: str) -> None:
        user = _require_user(db, user_id)
        if not verify_password(current_password or "", user.get("password")):
            raise UnauthorizedError("Current password is incorrect")
        _validate_password(new_password)
        UserRepository(db).update_user(user_id, {"password": hash_password(new_password)})
        logger.info(f"password_changed user_id={user_id}")

    @staticmethod
    def delete_account(db, user_id: str) -> bool:
        _require_user(db, user_id)
        deleted = UserRepository(db).delete_user(user_id)
        logger.info(f"account_deleted user_id={user_id}")
        return deleted

    # ------------------ Saved / created recipes ------------------
    @staticmethod
    def _recipes_for(db, ids: List[str]) -> List[Dict[str, Any]]:
        repo = RecipeRepository(db)
        by_id = {str(d["_id"]): d for d in repo.get_many(ids)}
        recipes = []
        for recipe_id in ids:
            doc = by_id.get(recipe_id)
            if doc is None:
                spoonacular_id = RecipeMapper.parse_external_id(recipe_id)
                doc = repo.get_by_spoonacular_id(spoonacular_id) if spoonacular_id is not None else None
            if doc is not None:
                recipes.append(RecipeMapper.to_public(doc))
        return recipes

    @staticmethod
    def save_recipe(db, user_id: str, recipe_id: str) -> List[str]:
        user = UserRepository(db).add_saved_recipe(user_id, recipe_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        logger.info(f"recipe_saved user_id={user_id} recipe_id={recipe_id}")
        return user.get("saved_recipes", [])

    @staticmethod
    def unsave_recipe(db, user_id: str, recipe_id: str) -> List[str]:
        user = UserRepository(db).remove_saved_recipe(user_id, recipe_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user.get("saved_recipes", [])

    @staticmethod
    def saved_recipes(db, user_id: str) -> List[Dict[str, Any]]:
        return UserService._recipes_for(db, _require_user(db, user_id).get("saved_recipes") or [])

    @staticmethod
    def created_recipes(db, user_id: str) -> List[Dict[str, Any]]:
        return UserService._recipes_for(db, _require_user(db, user_id).get("created_recipes") or [])

    # ------------------ Admin ------------------
    @staticmethod
    def list_users(db, page: int = 1, limit: int = 50, search: Optional[str] = None) -> Dict[str, Any]:
        repo = UserRepository(db)
        page = max(page, 1)
        users = repo.list_users(skip=(page - 1) * limit, limit=limit, search=search)
        return {
            "users": [UserMapper.to_summary(u) for u in users],
            "total": repo.count(),
            "page": page,
            "limit": limit,
        }

    @staticmethod
    def set_active(db, user_id: str, is_active: bool, acting_user_id: Optional[str] = None) -> UserResponse:
        if acting_user_id and str(acting_user_id) == str(user_id) and not is_active:
            raise ForbiddenError("Admins cannot deactivate their own account")
        _require_user(db, user_id)
        user = UserRepository(db).set_active(user_id, is_active)
        logger.info(f"user_active_changed user_id={user_id} is_active={is_active}")
        return UserMapper.to_response(user)

    @staticmethod
    def reset_password(db, user_id: str, new_password: str) -> None:
        _require_user(db, user_id)
        _validate_password(new_password)
        UserRepository(db).update_user(user_id, {"password": hash_password(new_password)})
        logger.info(f"password_reset user_id={user_id}")
