"""
Meal Plan Repository - Data access layer for weekly meal plans
"""

from datetime import datetime
from typing import Any, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from repositories.base import BaseRepository, Document
from app.exceptions import ConflictError


class MealPlanRepository(BaseRepository):
    """Repository for meal plan data access.

    ``week_start_date`` is stored as a naive UTC datetime at midnight of the Monday.
    """

    collection_name = "meal_plans"

    def ensure_indexes(self) -> None:
        self.collection.create_index(
            [("user_id", ASCENDING), ("week_start_date", ASCENDING)], unique=True
        )

    def create_plan(self, data: Document) -> Document:
        try:
            return self.create(data)
        except DuplicateKeyError:
            raise ConflictError("A meal plan already exists for this week")

    def get_by_id_and_user(self, plan_id: Any, user_id: str) -> Optional[Document]:
        """Get meal plan by ID for specific user"""
        query = self._id_filter(plan_id)
        if query is None:
            return None
        query["user_id"] = str(user_id)
        return self.collection.find_one(query)

    def find_by_user_and_week(self, user_id: str, week_start: datetime) -> Optional[Document]:
        return self.collection.find_one({"user_id": str(user_id), "week_start_date": week_start})

    def find_by_user(self, user_id: str, skip: int = 0, limit: int = 52) -> List[Document]:
        cursor = (
            self.collection.find({"user_id": str(user_id)})
            .sort("week_start_date", DESCENDING)
            .skip(max(skip, 0))
            .limit(max(limit, 1))
        )
        return list(cursor)

    def find_templates(self, user_id: str) -> List[Document]:
        cursor = self.collection.find({"user_id": str(user_id), "is_template": True}).sort(
            "updated_at", DESCENDING
        )
        return list(cursor)

    def delete_for_user(self, plan_id: Any, user_id: str) -> bool:
        query = self._id_filter(plan_id)
        if query is None:
            return False
        query["user_id"] = str(user_id)
        return self.collection.delete_one(query).deleted_count > 0
