"""MongoDB adapter: connection management and small document helpers.
"""

from typing import Optional, Any
import logging
import os
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient

logger = logging.getLogger("smartplates.mongo")

_client = None
_db = None

COLLECTIONS = {
    "users": "users",
    "recipes": "recipes",
    "meal_plans": "mealplans",
    "grocery_lists": "grocerylists",
    "saved_grocery_lists": "savedgrocerylists",
    "recipe_likes": "recipe_likes",
    "recipe_reviews": "recipe_reviews",
    "contact_messages": "contact_messages",
    "quota": "spoonacular_quota",
    "cache_recipe": "spoonacular_recipe_cache",
    "cache_search": "spoonacular_search_cache",
    "cache_ingredients": "spoonacular_ingredient_search_cache",
    "cache_random": "spoonacular_random_cache",
    "cache_nutrition": "spoonacular_nutrition_cache",
}


# ------------------ Connection ------------------
def get_db():
    """Lazy init DB connection."""
    global _client, _db
    if _db is not None:
        return _db
    uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    dbname = os.getenv("MONGO_DB_NAME", "smartplates")
    _client = MongoClient(uri)
    _db = _client[dbname]
    return _db


def set_db(db) -> None:
    """Use an already constructed database handle (tests inject mongomock here)."""
    global _client, _db
    _client = None
    _db = db


def connect(uri: str, db_name: str = "smartplates"):
    global _client, _db
    try:
        _client = MongoClient(uri, serverSelectionTimeoutMS=5000)
        _db = _client[db_name]
        _client.admin.command("ping")
        logger.info("Connected to MongoDB (database: %s)", db_name)
    except Exception as exc:
        _client = None
        _db = None
        logger.warning("Could not initialize MongoDB client: %s", exc)
        raise


def ping() -> bool:
    """Return True when the server answers a ping."""
    try:
        db = get_db()
        db.command("ping")
        return True
    except Exception as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False


def close():
    """Close MongoDB connection."""
    global _client, _db
    try:
        if _client is not None:
            _client.close()
            logger.info("MongoDB client closed")
    except Exception:
        logger.exception("Error closing MongoDB client")
    finally:
        _client = None
        _db = None


def get_collection(name: str, db=None):
    """Return a collection by logical name (see COLLECTIONS) or raw collection name."""
    if db is None:
        db = get_db()
    return db[COLLECTIONS.get(name, name)]


# ------------------ Helpers ------------------
def to_object_id(value: Any) -> Optional[ObjectId]:
    """Convert a string or ObjectId to ObjectId; None when the value is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if not value:
        return None
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def _stringify(value: Any):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [_stringify(v) for v in value]
    if isinstance(value, dict):
        return {k: _stringify(v) for k, v in value.items()}
    return value


def to_public(doc: Optional[dict]) -> Optional[dict]:
    """Document in API form: ``_id`` becomes ``id`` and ObjectIds become strings."""
    if doc is None:
        return None
    out = {k: _stringify(v) for k, v in doc.items() if k != "_id"}
    if "_id" in doc:
        out["id"] = str(doc["_id"])
    return out
