"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from adapters import mongo_adapter

Document = Dict[str, Any]


class BaseRepository:
    """
    Base repository providing common CRUD operations over one MongoDB collection.
    All repositories should inherit from this class and set ``collection_name``.
    """

    collection_name: str = ""

    def __init__(self, db=None):
        self.db = db if db is not None else mongo_adapter.get_db()
        self.collection = mongo_adapter.get_collection(self.collection_name, self.db)

    @staticmethod
    def _id_filter(entity_id: Any) -> Optional[Document]:
        oid = mongo_adapter.to_object_id(entity_id)
        if oid is None:
            return None
        return {"_id": oid}

    def get_by_id(self, entity_id: Any) -> Optional[Document]:
        """
        Get entity by ID.

        Args:
            entity_id: ObjectId or its 24-char hex string

        Returns:
            Document or None if not found (or the id is malformed)
        """
        query = self._id_filter(entity_id)
        if query is None:
            return None
        return self.collection.find_one(query)

    def get_all(self, skip: int = 0, limit: int = 100, query: Optional[Document] = None) -> List[Document]:
        """Get all entities with pagination"""
        cursor = self.collection.find(query or {}).sort("_id", -1).skip(max(skip, 0)).limit(max(limit, 1))
        return list(cursor)

    def count(self, query: Optional[Document] = None) -> int:
        return self.collection.count_documents(query or {})

    def create(self, data: Document) -> Document:
        """Insert a document, stamping created_at/updated_at, and return it with _id."""
        now = datetime.utcnow()
        doc = dict(data)
        doc.setdefault("created_at", now)
        doc["updated_at"] = now
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def update(self, entity_id: Any, changes: Document) -> Optional[Document]:
        """$set the given fields and return the updated document (None if absent)."""
        query = self._id_filter(entity_id)
        if query is None:
            return None
        fields = dict(changes)
        fields["updated_at"] = datetime.utcnow()
        return self.collection.find_one_and_update(
            query, {"$set": fields}, return_document=ReturnDocument.AFTER
        )

    def delete(self, entity_id: Any) -> bool:
        """Delete entity by ID"""
        query = self._id_filter(entity_id)
        if query is None:
            return False
        return self.collection.delete_one(query).deleted_count > 0

    def exists(self, entity_id: Any) -> bool:
        """Check if entity exists"""
        return self.get_by_id(entity_id) is not None
