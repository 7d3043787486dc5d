"""
Recipe Repository - Data access layer for recipe documents (local and Spoonacular mirrors)
"""

import logging
import re
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import OperationFailure

from adapters.mongo_adapter import to_object_id
from repositories.base import BaseRepository, Document

logger = logging.getLogger("smartplates.repositories.recipes")

DIET_ALIASES: Dict[str, List[str]] = {
    "vegetarian": ["lacto ovo vegetarian", "vegetarian"],
    "vegan": ["vegan"],
    "gluten free": ["gluten free"],
    "ketogenic": ["ketogenic"],
    "paleo": ["paleolithic"],
    "primal": ["primal"],
    "whole30": ["whole 30"],
    "pescatarian": ["pescatarian"],
    "dairy free": ["dairy free"],
}

INTOLERANCE_PATTERNS: Dict[str, str] = {
    "egg": r"\beggs?\b",
    "gluten": r"(gluten|wheat|flour|barley|rye)",
    "dairy": r"(milk|cheese|butter|cream|yogurt|lactose)",
    "peanut": r"peanut",
    "seafood": r"(fish|shrimp|prawn|crab|lobster|tuna|salmon)",
    "sesame": r"sesame",
    "soy": r"(soy|soya|tofu|soybean)",
    "sulfite": r"(sulfite|sulphite)",
    "tree nut": r"(almond|walnut|hazelnut|cashew|pecan|pistachio|macadamia)",
    "wheat": r"(wheat|flour)",
}

DIFFICULTY_MINUTES: Dict[str, Dict[str, int]] = {
    "easy": {"$lte": 15},
    "medium": {"$gte": 16, "$lte": 30},
    "hard": {"$gte": 31},
}

# Fields that belong to the local copy and must survive a refresh from Spoonacular
_LOCAL_FIELDS = ("created_at", "rating", "ratings_count", "likes_count", "author_id", "author_name",
                 "is_published", "is_pending", "moderation_notes")

_dedupe_ran = False


@dataclass
class DedupeSummary:
    by: str
    groups: int
    removed: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _regex(value: str) -> Dict[str, Any]:
    return {"$regex": re.escape(value.strip()), "$options": "i"}


def build_search_query(filters: Dict[str, Any]) -> Dict[str, Any]:
    """
    Translate search filters into a MongoDB query.

    - query: title/description regex, or any comma-separated ingredient name
    - type: dish type
    - cuisine: cuisine name, case-insensitive
    - diet: diet name (aliases expanded, e.g. paleo -> paleolithic)
    - intolerances: comma-separated; recipes with a matching ingredient are excluded
    - max_ready_time / difficulty: ready_in_minutes bounds
    - author_id: recipes created by a user
    - require_instructions: only recipes with at least one step and one ingredient
    """
    clauses: List[Dict[str, Any]] = []

    if filters.get("require_instructions"):
        clauses.append({"analyzed_instructions.0.steps.0.step": {"$exists": True, "$nin": ["", None]}})
        clauses.append({"extended_ingredients.0": {"$exists": True}})

    query_text = (filters.get("query") or "").strip()
    if query_text:
        ors: List[Dict[str, Any]] = [
            {"title": _regex(query_text)},
            {"description": _regex(query_text)},
        ]
        for name in [p.strip() for p in query_text.split(",") if p.strip()]:
            ors.append({"extended_ingredients.name": _regex(name)})
        clauses.append({"$or": ors})

    if filters.get("type"):
        clauses.append({"dish_types": {"$in": [filters["type"].strip().lower()]}})

    if filters.get("cuisine"):
        clauses.append({"cuisines": _regex(filters["cuisine"])})

    if filters.get("diet"):
        diet = filters["diet"].strip().lower()
        clauses.append({"diets": {"$in": DIET_ALIASES.get(diet, [diet])}})

    minutes: Dict[str, int] = {}
    if filters.get("difficulty"):
        minutes.update(DIFFICULTY_MINUTES.get(filters["difficulty"].strip().lower(), {}))
    if filters.get("max_ready_time") is not None:
        cap = int(filters["max_ready_time"])
        minutes["$lte"] = min(cap, minutes.get("$lte", cap))
    if minutes:
        clauses.append({"ready_in_minutes": minutes})

    intolerances = filters.get("intolerances")
    if intolerances:
        if isinstance(intolerances, str):
            intolerances = intolerances.split(",")
        excluded = []
        for key in [i.strip().lower() for i in intolerances if i and i.strip()]:
            pattern = INTOLERANCE_PATTERNS.get(key, re.escape(key))
            excluded.append({"extended_ingredients.name": {"$regex": pattern, "$options": "i"}})
        if excluded:
            clauses.append({"$nor": excluded})

    if filters.get("author_id"):
        clauses.append({"author_id": str(filters["author_id"])})

    if filters.get("published_only"):
        clauses.append({"is_published": {"$ne": False}})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


class RecipeRepository(BaseRepository):
    """Repository for recipe data access"""

    collection_name = "recipes"

    def search(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 30,
        randomize: bool = False,
    ) -> Tuple[List[Document], int]:
        """Search recipes; returns (page of documents, total matching)."""
        page = max(1, int(page))
        limit = min(100, max(1, int(limit)))
        query = build_search_query(filters or {})

        if randomize:
            docs = list(self.collection.aggregate([{"$match": query}, {"$sample": {"size": limit}}]))
        else:
            docs = list(
                self.collection.find(query)
                .sort([("created_at", -1), ("_id", 1)])
                .skip((page - 1) * limit)
                .limit(limit)
            )
        total = self.collection.count_documents(query)
        logger.info(f"recipe_search total={total} page={page} limit={limit}")
        return docs, total

    def get_by_spoonacular_id(self, spoonacular_id: int) -> Optional[Document]:
        return self.collection.find_one({"spoonacular_id": int(spoonacular_id)})

    def get_many(self, ids: List[Any]) -> List[Document]:
        oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
        if not oids:
            return []
        return list(self.collection.find({"_id": {"$in": oids}}))

    def upsert_external(self, recipe: Document, author: Optional[Dict[str, Any]] = None) -> Document:
        """Insert or refresh a Spoonacular mirror keyed on spoonacular_id."""
        content = {k: v for k, v in recipe.items() if k not in _LOCAL_FIELDS and k != "_id"}
        content["updated_at"] = datetime.utcnow()
        on_insert = {k: recipe[k] for k in _LOCAL_FIELDS if k in recipe}
        on_insert.setdefault("created_at", content["updated_at"])
        if author:
            on_insert["author_id"] = author.get("id")
            on_insert["author_name"] = author.get("name")
        return self.collection.find_one_and_update(
            {"spoonacular_id": int(recipe["spoonacular_id"])},
            {"$set": content, "$setOnInsert": on_insert},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def increment_likes(self, recipe_id: Any, delta: int) -> Optional[Document]:
        """$inc likes_count; the count never goes below zero."""
        query = self._id_filter(recipe_id)
        if query is None:
            return None
        doc = self.collection.find_one_and_update(
            query, {"$inc": {"likes_count": delta}}, return_document=ReturnDocument.AFTER
        )
        if doc is not None and doc.get("likes_count", 0) < 0:
            doc = self.collection.find_one_and_update(
                query, {"$set": {"likes_count": 0}}, return_document=ReturnDocument.AFTER
            )
        return doc

    def set_rating(self, recipe_id: Any, rating: float, ratings_count: int) -> None:
        query = self._id_filter(recipe_id)
        if query is not None:
            self.collection.update_one(
                query, {"$set": {"rating": rating, "ratings_count": ratings_count}}
            )

    def count_by_source(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for row in self.collection.aggregate([{"$group": {"_id": "$source", "count": {"$sum": 1}}}]):
            counts[row["_id"] or "user"] = row["count"]
        return counts

    def count_pending(self) -> int:
        return self.count({"is_pending": True})

    def distinct_values(self, field: str) -> List[str]:
        values = self.collection.distinct(field)
        return sorted({str(v).strip() for v in values if v and str(v).strip()})

    # ------------------ Dedupe ------------------
    def _try_create_indexes(self) -> bool:
        try:
            self.collection.create_index(
                [("spoonacular_id", ASCENDING)], unique=True, sparse=True
            )
            return True
        except OperationFailure as exc:
            logger.warning("Unique spoonacular_id index not created yet: %s", exc)
            return False

    def _dedupe_on_field(self, field: str) -> DedupeSummary:
        groups = list(
            self.collection.aggregate(
                [
                    {"$match": {field: {"$ne": None}}},
                    {"$group": {"_id": f"${field}", "ids": {"$push": "$_id"}, "count": {"$sum": 1}}},
                    {"$match": {"count": {"$gt": 1}}},
                ]
            )
        )
        removed = 0
        for group in groups:
            # keep the oldest document (smallest ObjectId)
            to_delete = sorted(group["ids"])[1:]
            if to_delete:
                removed += self.collection.delete_many({"_id": {"$in": to_delete}}).deleted_count
        return DedupeSummary(by=field, groups=len(groups), removed=removed)

    def ensure_unique_index_and_dedupe(self, force: bool = False) -> Optional[DedupeSummary]:
        """
        Make spoonacular_id unique: create the index, and if existing duplicates
        prevent that, delete all but the oldest copy of each and retry.

        Runs once per process unless ``force`` is set. Returns None when skipped.
        """
        global _dedupe_ran
        if _dedupe_ran and not force:
            return None
        _dedupe_ran = True

        self._try_create_indexes()
        summary = self._dedupe_on_field("spoonacular_id")
        self._try_create_indexes()
        logger.info(
            "recipe_dedupe by=%s groups=%d removed=%d", summary.by, summary.groups, summary.removed
        )
        return summary
