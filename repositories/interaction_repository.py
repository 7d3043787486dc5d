"""
Interaction Repository - likes and reviews on recipes
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from adapters import mongo_adapter


class InteractionRepository:
    """Likes (one record per user and recipe) and reviews (one per user and recipe)."""

    def __init__(self, db=None):
        self.db = db if db is not None else mongo_adapter.get_db()
        self.likes = mongo_adapter.get_collection("recipe_likes", self.db)
        self.reviews = mongo_adapter.get_collection("recipe_reviews", self.db)

    def ensure_indexes(self) -> None:
        self.likes.create_index([("recipe_id", ASCENDING), ("user_id", ASCENDING)], unique=True)
        self.reviews.create_index([("recipe_id", ASCENDING), ("user_id", ASCENDING)], unique=True)

    # ------------------ Likes ------------------
    def has_liked(self, recipe_id: str, user_id: str) -> bool:
        return self.likes.find_one({"recipe_id": recipe_id, "user_id": user_id}) is not None

    def add_like(self, recipe_id: str, user_id: str) -> bool:
        """Record a like; False when the user had already liked the recipe."""
        result = self.likes.update_one(
            {"recipe_id": recipe_id, "user_id": user_id},
            {"$setOnInsert": {"created_at": datetime.utcnow()}},
            upsert=True,
        )
        return result.upserted_id is not None

    def remove_like(self, recipe_id: str, user_id: str) -> bool:
        return self.likes.delete_one({"recipe_id": recipe_id, "user_id": user_id}).deleted_count > 0

    def count_likes(self, recipe_id: str) -> int:
        return self.likes.count_documents({"recipe_id": recipe_id})

    # ------------------ Reviews ------------------
    def upsert_review(self, recipe_id: str, user: Dict[str, Any], rating: int, comment: str) -> Dict[str, Any]:
        now = datetime.utcnow()
        return self.reviews.find_one_and_update(
            {"recipe_id": recipe_id, "user_id": user["id"]},
            {
                "$set": {
                    "rating": int(rating),
                    "comment": comment,
                    "user_name": user.get("name"),
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def get_review(self, recipe_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        return self.reviews.find_one({"recipe_id": recipe_id, "user_id": user_id})

    def delete_review(self, recipe_id: str, user_id: str) -> bool:
        return self.reviews.delete_one({"recipe_id": recipe_id, "user_id": user_id}).deleted_count > 0

    def list_reviews(self, recipe_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[Dict[str, Any]], int]:
        query = {"recipe_id": recipe_id}
        cursor = self.reviews.find(query).sort("created_at", DESCENDING).skip(max(skip, 0)).limit(max(limit, 1))
        return list(cursor), self.reviews.count_documents(query)

    def ratings(self, recipe_id: str) -> List[int]:
        return [int(r["rating"]) for r in self.reviews.find({"recipe_id": recipe_id}, {"rating": 1})]

    def count_reviews(self) -> int:
        return self.reviews.count_documents({})
