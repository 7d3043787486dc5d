"""
User Repository - Data access layer for user accounts
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from repositories.base import BaseRepository, Document
from app.exceptions import ConflictError


class UserRepository(BaseRepository):
    """Repository for user data access"""

    collection_name = "users"

    def ensure_indexes(self) -> None:
        self.collection.create_index([("email", ASCENDING)], unique=True)

    def get_by_email(self, email: str) -> Optional[Document]:
        """Get user by email (stored lower-cased)"""
        return self.collection.find_one({"email": (email or "").strip().lower()})

    def create_user(self, email: str, name: str, password_hash: str, role: str = "user") -> Document:
        """Create a new user"""
        data = {
            "email": email.strip().lower(),
            "name": name.strip(),
            "password": password_hash,
            "role": role,
            "avatar": None,
            "bio": None,
            "is_active": True,
            "is_email_verified": False,
            "dietary_restrictions": [],
            "favorite_categories": [],
            "saved_recipes": [],
            "created_recipes": [],
            "liked_recipes": [],
            "last_login_at": None,
        }
        if self.get_by_email(data["email"]):
            raise ConflictError(f"User with email {data['email']} already exists")
        try:
            return self.create(data)
        except DuplicateKeyError:
            raise ConflictError(f"User with email {data['email']} already exists")

    def update_user(self, user_id: Any, changes: Dict[str, Any]) -> Optional[Document]:
        """Update user information"""
        return self.update(user_id, changes)

    def delete_user(self, user_id: Any) -> bool:
        return self.delete(user_id)

    def _push(self, user_id: Any, op: str, field: str, value: Any) -> Optional[Document]:
        query = self._id_filter(user_id)
        if query is None:
            return None
        return self.collection.find_one_and_update(
            query,
            {op: {field: value}, "$set": {"updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )

    def add_saved_recipe(self, user_id: Any, recipe_id: str) -> Optional[Document]:
        return self._push(user_id, "$addToSet", "saved_recipes", recipe_id)

    def remove_saved_recipe(self, user_id: Any, recipe_id: str) -> Optional[Document]:
        return self._push(user_id, "$pull", "saved_recipes", recipe_id)

    def add_created_recipe(self, user_id: Any, recipe_id: str) -> Optional[Document]:
        return self._push(user_id, "$addToSet", "created_recipes", recipe_id)

    def remove_created_recipe(self, user_id: Any, recipe_id: str) -> Optional[Document]:
        return self._push(user_id, "$pull", "created_recipes", recipe_id)

    def add_liked_recipe(self, user_id: Any, recipe_id: str) -> Optional[Document]:
        return self._push(user_id, "$addToSet", "liked_recipes", recipe_id)

    def remove_liked_recipe(self, user_id: Any, recipe_id: str) -> Optional[Document]:
        return self._push(user_id, "$pull", "liked_recipes", recipe_id)

    def set_active(self, user_id: Any, is_active: bool) -> Optional[Document]:
        return self.update(user_id, {"is_active": bool(is_active)})

    def touch_login(self, user_id: Any) -> Optional[Document]:
        return self.update(user_id, {"last_login_at": datetime.utcnow()})

    def list_users(self, skip: int = 0, limit: int = 50, search: Optional[str] = None) -> List[Document]:
        query: Dict[str, Any] = {}
        if search:
            query["$or"] = [
                {"email": {"$regex": re.escape(search), "$options": "i"}},
                {"name": {"$regex": re.escape(search), "$options": "i"}},
            ]
        return self.get_all(skip=skip, limit=limit, query=query)

    def count_active_since(self, since: datetime) -> int:
        return self.count({"last_login_at": {"$gte": since}})
