"""
Grocery Repositories - current grocery list per user and saved (named) lists
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from repositories.base import BaseRepository, Document


class GroceryListRepository(BaseRepository):
    """One working grocery list per user, keyed on user_id."""

    collection_name = "grocery_lists"

    def ensure_indexes(self) -> None:
        self.collection.create_index([("user_id", ASCENDING)], unique=True)

    def find_by_user(self, user_id: str) -> Optional[Document]:
        return self.collection.find_one({"user_id": str(user_id)})

    def add_items(self, user_id: str, items: List[Dict[str, Any]]) -> Document:
        """Append items, creating the list on first use."""
        now = datetime.utcnow()
        return self.collection.find_one_and_update(
            {"user_id": str(user_id)},
            {
                "$push": {"items": {"$each": items}},
                "$set": {"updated_at": now},
                "$setOnInsert": {"user_id": str(user_id), "created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def replace_items(self, user_id: str, items: List[Dict[str, Any]], meal_plan_id: Optional[str] = None) -> Document:
        now = datetime.utcnow()
        return self.collection.find_one_and_update(
            {"user_id": str(user_id)},
            {
                "$set": {"items": items, "meal_plan_id": meal_plan_id, "updated_at": now},
                "$setOnInsert": {"user_id": str(user_id), "created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def clear(self, user_id: str) -> bool:
        return self.collection.delete_one({"user_id": str(user_id)}).deleted_count > 0


class SavedGroceryListRepository(BaseRepository):
    """Named snapshots of grocery lists."""

    collection_name = "saved_grocery_lists"

    def save(self, user_id: str, name: str, items: List[Dict[str, Any]], meal_plan_id: Optional[str] = None) -> Document:
        return self.create(
            {"user_id": str(user_id), "name": name, "items": items, "meal_plan_id": meal_plan_id}
        )

    def find_by_user(self, user_id: str) -> List[Document]:
        cursor = self.collection.find({"user_id": str(user_id)}).sort("created_at", DESCENDING)
        return list(cursor)

    def get_for_user(self, list_id: Any, user_id: str) -> Optional[Document]:
        query = self._id_filter(list_id)
        if query is None:
            return None
        query["user_id"] = str(user_id)
        return self.collection.find_one(query)

    def delete_for_user(self, list_id: Any, user_id: str) -> bool:
        query = self._id_filter(list_id)
        if query is None:
            return False
        query["user_id"] = str(user_id)
        return self.collection.delete_one(query).deleted_count > 0

    def set_item_checked(self, list_id: Any, user_id: str, index: int, checked: bool) -> Optional[Document]:
        query = self._id_filter(list_id)
        if query is None:
            return None
        query["user_id"] = str(user_id)
        return self.collection.find_one_and_update(
            query,
            {"$set": {f"items.{int(index)}.checked": bool(checked), "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
