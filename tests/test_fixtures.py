"""
Shared test fixtures and utilities for the SmartPlates test suite.

MongoDB is replaced by mongomock, Spoonacular by FakeSpoonacular, and time by
a Clock that tests move forward by hand.
"""

import uuid
from datetime import datetime, timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from adapters import mongo_adapter
from api.dependencies import get_cache
from core.rate_limiter import RateLimiter
from core.ttl_cache import TTLCache
from main import app
from repositories import RecipeRepository, UserRepository
from services.recipe_cache_service import RecipeCacheService, reset_cache_service
from services.user_service import hash_password

# TestClient is used without a context manager so the lifespan (real MongoDB) never runs
client = TestClient(app)


def unique_email(prefix: str = "test") -> str:
    """Generate unique email address using UUID to avoid conflicts"""
    return f"{prefix}-{uuid.uuid4()}@example.com"


class Clock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2025, 3, 10, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSpoonacular:
    """Stands in for SpoonacularClient; records calls and returns canned payloads."""

    DEFAULT_NUMBER = 12

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.calls = []
        self.error = None
        self.last_quota = {"used": None, "left": None, "request": None}
        self.search_results = [spoonacular_recipe(101, "Tomato Basil Pasta")]
        self.recipes = {101: spoonacular_recipe(101, "Tomato Basil Pasta")}
        self.by_ingredients = [
            {
                "id": 201,
                "title": "Cheesy Omelette",
                "image": "https://img.example.com/201.jpg",
                "usedIngredients": [{"name": "egg"}, {"name": "cheese"}],
                "missedIngredients": [{"name": "chives"}],
                "likes": 12,
            }
        ]

    def is_configured(self) -> bool:
        return self.configured

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.error is not None:
            raise self.error

    def complex_search(self, query=None, filters=None):
        self._call("complex_search", query)
        return {"results": list(self.search_results), "totalResults": len(self.search_results)}

    def get_recipe_information(self, recipe_id):
        self._call("recipe_information", recipe_id)
        return self.recipes.get(int(recipe_id))

    def find_by_ingredients(self, ingredients, number=DEFAULT_NUMBER):
        self._call("find_by_ingredients", list(ingredients))
        return list(self.by_ingredients)

    def random_recipes(self, tags=None, number=DEFAULT_NUMBER):
        self._call("random", list(tags or []))
        return list(self.recipes.values())[:number]

    def nutrition_widget(self, recipe_id):
        self._call("nutrition", recipe_id)
        return {"calories": "420", "nutrients": [{"name": "Calories", "amount": 420, "unit": "kcal"}]}

    def close(self):
        pass


def spoonacular_recipe(recipe_id: int, title: str, **overrides):
    """Raw Spoonacular recipe payload as returned by /information."""
    raw = {
        "id": recipe_id,
        "title": title,
        "image": f"https://img.example.com/{recipe_id}.jpg",
        "summary": f"<b>{title}</b> is a quick weeknight dinner.",
        "readyInMinutes": 25,
        "servings": 2,
        "aggregateLikes": 40,
        "cuisines": ["Italian"],
        "dishTypes": ["main course", "dinner"],
        "diets": ["lacto ovo vegetarian"],
        "extendedIngredients": [
            {"id": 1, "name": "spaghetti", "amount": 200, "unit": "g"},
            {"id": 2, "name": "tomato", "amount": 4, "unit": ""},
            {"id": 3, "name": "basil", "amount": 1, "unit": "handful"},
        ],
        "analyzedInstructions": [
            {"name": "", "steps": [{"number": 1, "step": "Boil the pasta."}, {"number": 2, "step": "Toss with sauce."}]}
        ],
    }
    raw.update(overrides)
    return raw


def make_recipe_doc(title="Lemon Chicken", author_id=None, **overrides):
    """Local (user authored) recipe document."""
    doc = {
        "title": title,
        "description": f"{title} for two",
        "image": "https://img.example.com/local.jpg",
        "ready_in_minutes": 30,
        "servings": 2,
        "extended_ingredients": [
            {"name": "chicken breast", "amount": 2, "unit": "pieces"},
            {"name": "lemon", "amount": 1, "unit": ""},
            {"name": "salt", "amount": 1, "unit": "tsp"},
        ],
        "analyzed_instructions": [{"name": "", "steps": [{"number": 1, "step": "Roast everything."}]}],
        "cuisines": ["Mediterranean"],
        "dish_types": ["main course"],
        "diets": ["gluten free"],
        "source": "user",
        "author_id": author_id,
        "author_name": "Sarah Martinez",
        "is_published": True,
        "rating": 0,
        "ratings_count": 0,
        "likes_count": 0,
    }
    doc.update(overrides)
    return doc


def make_cache_service(db, client=None, clock=None, limiter=None, quota_limit=None):
    clock = clock or Clock()
    service = RecipeCacheService(
        db,
        client or FakeSpoonacular(),
        limiter or RateLimiter(100, 60, key_prefix="test", clock=lambda: clock().timestamp()),
        memory=TTLCache(3600, clock=lambda: clock().timestamp()),
        clock=clock,
    )
    if quota_limit is not None:
        service.quota.limit = quota_limit
        service.quota.repo.quota_limit = quota_limit
    return service


@pytest.fixture
def mongo_db():
    """Fresh in-memory database wired into the adapter for each test."""
    db = mongomock.MongoClient()["smartplates_test"]
    mongo_adapter.set_db(db)
    reset_cache_service()
    yield db
    app.dependency_overrides.clear()
    reset_cache_service()
    mongo_adapter.set_db(None)


@pytest.fixture
def cache_service(mongo_db):
    """Cache service over FakeSpoonacular, also injected into the API."""
    service = make_cache_service(mongo_db)
    app.dependency_overrides[get_cache] = lambda: service
    return service


def create_user(db, name="Sarah Martinez", email=None, password="secret123", role="user"):
    return UserRepository(db).create_user(email or unique_email("sarah.martinez"), name, hash_password(password), role)


def auth_headers(user) -> dict:
    return {"X-User-Id": str(user["_id"])}


def create_recipe(db, **kwargs):
    return RecipeRepository(db).create(make_recipe_doc(**kwargs))
