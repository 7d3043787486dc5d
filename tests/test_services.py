"""
Tests for the service layer against a mongomock database.

- RecipeService: local search, Spoonacular fallback and mirroring, authoring rules
- InteractionService: likes, reviews and rating summaries
- UserService: registration, login, profile and saved recipes
- MealPlanService: weekly plans, copying and meal slots
- GroceryService: list generation from a meal plan, saved lists
- AIService / AdminService / ContactService
"""

from datetime import date

import pytest

from app.exceptions import (
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    RateLimitExceededError,
    ServiceValidationError,
    UnauthorizedError,
)
from adapters import vision_adapter
from core.rate_limiter import RateLimiter
from domain.mappers.recipe_mapper import RecipeMapper
from domain.schemas.grocery_schemas import GroceryItem
from domain.schemas.plan_schemas import DayPlan, MealPlanUpdate, MealSlot
from domain.schemas.recipe_schemas import RecipeCreate, RecipeUpdate
from domain.schemas.user_schemas import UserUpdate
from repositories import GroceryListRepository, MealPlanRepository, RecipeRepository, UserRepository
from services import (
    AdminService,
    AIService,
    ContactService,
    GroceryService,
    InteractionService,
    MealPlanService,
    RecipeService,
    UserService,
)
from test_fixtures import (
    FakeSpoonacular,
    create_recipe,
    create_user,
    make_cache_service,
    spoonacular_recipe,
    unique_email,
)


def recipe_body(title="Shakshuka"):
    return RecipeCreate(
        title=title,
        description="Eggs poached in spiced tomato sauce",
        servings=2,
        extended_ingredients=[{"name": "egg", "amount": 4}, {"name": "tomato", "amount": 3}],
        analyzed_instructions=[{"name": "", "steps": [{"number": 1, "step": "Simmer sauce, add eggs."}]}],
        cuisines=["Middle Eastern"],
    )


# =============================================================================
# RECIPE SERVICE TESTS
# =============================================================================


def test_search_returns_local_recipes_first(mongo_db, cache_service):
    create_recipe(mongo_db, title="Lemon Chicken")

    result = RecipeService.search(mongo_db, {"query": "lemon"}, cache=cache_service)

    assert result["source"] == "mongodb"
    assert result["total"] == 1
    assert result["recipes"][0]["title"] == "Lemon Chicken"
    assert cache_service.client.calls == []


def test_search_skips_unpublished_recipes(mongo_db, cache_service):
    create_recipe(mongo_db, title="Draft Soup", is_published=False)

    result = RecipeService.search(mongo_db, {}, cache=cache_service)

    assert result["total"] == 0
    assert result["source"] == "mongodb"


def test_search_falls_back_to_spoonacular_and_mirrors(mongo_db, cache_service):
    result = RecipeService.search(mongo_db, {"query": "pasta", "diet": "vegetarian"}, page=1, limit=12, cache=cache_service)

    assert result["source"] == "spoonacular"
    assert result["recipes"][0]["spoonacular_id"] == 101
    assert cache_service.client.calls == [("complex_search", "pasta")]

    again = RecipeService.search(mongo_db, {"query": "pasta"}, cache=cache_service)
    assert again["source"] == "mongodb"
    assert again["recipes"][0]["title"] == "Tomato Basil Pasta"


def test_search_without_external_source_needs_fallback(mongo_db):
    result = RecipeService.search(mongo_db, {"query": "ramen"}, cache=None)
    assert result["source"] == "fallback-needed"

    unconfigured = make_cache_service(mongo_db, FakeSpoonacular(configured=False))
    result = RecipeService.search(mongo_db, {"query": "ramen"}, cache=unconfigured)
    assert result["source"] == "fallback-needed"
    assert result["notice"]


def test_search_reports_upstream_failure(mongo_db):
    fake = FakeSpoonacular()
    fake.error = ExternalServiceError("down", status_code=500)

    result = RecipeService.search(mongo_db, {"query": "ramen"}, cache=make_cache_service(mongo_db, fake))

    assert result["source"] == "fallback-needed"
    assert result["recipes"] == []


def test_search_reports_quota_exceeded(mongo_db):
    cache = make_cache_service(mongo_db, quota_limit=5)

    result = RecipeService.search(mongo_db, {"query": "ramen"}, cache=cache)

    assert result["source"] == "quota-exceeded"
    assert cache.client.calls == []


def test_get_recipe_by_external_id_mirrors_once(mongo_db, cache_service):
    recipe = RecipeService.get_recipe(mongo_db, "spoonacular-101", cache_service)
    again = RecipeService.get_recipe(mongo_db, "101", cache_service)

    assert recipe["id"] == again["id"]
    assert recipe["source"] == "spoonacular"
    assert len(cache_service.client.calls) == 1
    assert RecipeService.count(mongo_db) == {"count": 1, "by_source": {"spoonacular": 1}}


def test_get_recipe_not_found(mongo_db, cache_service):
    with pytest.raises(NotFoundError):
        RecipeService.get_recipe(mongo_db, "64b7f0c2a1b2c3d4e5f60718", cache_service)
    with pytest.raises(NotFoundError):
        RecipeService.get_recipe(mongo_db, "spoonacular-999", cache_service)
    with pytest.raises(NotFoundError):
        RecipeService.get_recipe(mongo_db, "spoonacular-101", None)


def test_get_recipe_quota_exceeded(mongo_db):
    cache = make_cache_service(mongo_db, quota_limit=5)
    with pytest.raises(QuotaExceededError):
        RecipeService.get_recipe(mongo_db, "spoonacular-101", cache)


def test_get_nutrition(mongo_db, cache_service):
    nutrition = RecipeService.get_nutrition(mongo_db, "spoonacular-101", cache_service)
    assert nutrition["source"] == "api"
    assert nutrition["nutrition"]["calories"] == "420"

    local = create_recipe(mongo_db)
    with pytest.raises(NotFoundError):
        RecipeService.get_nutrition(mongo_db, str(local["_id"]), cache_service)


def test_create_recipe_sets_author_and_limits_uploads(mongo_db):
    user = create_user(mongo_db)
    limiter = RateLimiter(1, 60, key_prefix="test-upload")

    recipe = RecipeService.create_recipe(mongo_db, recipe_body(), user, limiter=limiter)

    assert recipe["author_id"] == str(user["_id"])
    assert recipe["source"] == "user"
    assert recipe["likes_count"] == 0
    assert "spoonacular_id" not in recipe
    assert UserRepository(mongo_db).get_by_id(user["_id"])["created_recipes"] == [recipe["id"]]

    with pytest.raises(RateLimitExceededError):
        RecipeService.create_recipe(mongo_db, recipe_body("Another"), user, limiter=limiter)


def test_only_author_or_admin_can_change_recipe(mongo_db):
    author = create_user(mongo_db)
    other = create_user(mongo_db, name="Other Cook")
    admin = create_user(mongo_db, name="Admin", role="admin")
    recipe = RecipeService.create_recipe(mongo_db, recipe_body(), author, limiter=RateLimiter(5, 60))

    with pytest.raises(ForbiddenError):
        RecipeService.update_recipe(mongo_db, recipe["id"], RecipeUpdate(title="Mine now"), other)

    updated = RecipeService.update_recipe(mongo_db, recipe["id"], RecipeUpdate(title="Green Shakshuka"), admin)
    assert updated["title"] == "Green Shakshuka"
    assert updated["description"] == "Eggs poached in spiced tomato sauce"

    with pytest.raises(ForbiddenError):
        RecipeService.delete_recipe(mongo_db, recipe["id"], other)
    assert RecipeService.delete_recipe(mongo_db, recipe["id"], author) is True
    assert UserRepository(mongo_db).get_by_id(author["_id"])["created_recipes"] == []
    with pytest.raises(NotFoundError):
        RecipeService.delete_recipe(mongo_db, recipe["id"], author)


def test_import_spoonacular_is_idempotent(mongo_db, cache_service):
    user = create_user(mongo_db)

    recipe, created = RecipeService.import_spoonacular(mongo_db, 101, user, cache_service)
    again, created_again = RecipeService.import_spoonacular(mongo_db, 101, user, cache_service)

    assert created is True
    assert created_again is False
    assert again["id"] == recipe["id"]
    assert recipe["author_id"] == str(user["_id"])
    with pytest.raises(NotFoundError):
        RecipeService.import_spoonacular(mongo_db, 999, user, cache_service)


def test_resolve_id(mongo_db, cache_service):
    assert RecipeService.resolve_id(mongo_db, "spoonacular-101")["local_id"] is None

    recipe = RecipeService.get_recipe(mongo_db, "spoonacular-101", cache_service)

    assert RecipeService.resolve_id(mongo_db, "spoonacular-101") == {
        "id": "spoonacular-101",
        "local_id": recipe["id"],
        "spoonacular_id": 101,
    }
    assert RecipeService.resolve_id(mongo_db, recipe["id"])["local_id"] == recipe["id"]


def test_categories(mongo_db):
    create_recipe(mongo_db, cuisines=["Greek"], dish_types=["salad"], diets=["vegetarian"])

    categories = RecipeService.categories(mongo_db)

    assert categories["cuisines"] == ["Greek"]
    assert categories["dish_types"] == ["salad"]
    assert categories["diets"] == ["vegetarian"]


# =============================================================================
# INTERACTION SERVICE TESTS
# =============================================================================


def test_toggle_like(mongo_db):
    user = create_user(mongo_db)
    recipe_id = str(create_recipe(mongo_db)["_id"])

    assert InteractionService.toggle_like(mongo_db, recipe_id, str(user["_id"])) == {"liked": True, "total_likes": 1}
    assert RecipeRepository(mongo_db).get_by_id(recipe_id)["likes_count"] == 1
    assert UserRepository(mongo_db).get_by_id(user["_id"])["liked_recipes"] == [recipe_id]

    assert InteractionService.toggle_like(mongo_db, recipe_id, str(user["_id"])) == {"liked": False, "total_likes": 0}
    with pytest.raises(NotFoundError):
        InteractionService.toggle_like(mongo_db, "64b7f0c2a1b2c3d4e5f60718", str(user["_id"]))


def test_toggle_like_keeps_spoonacular_like_count(mongo_db):
    """
    Verifies:
    - A mirror's likes_count seeded from aggregateLikes is adjusted, not recounted
    - Liking twice from two users and unliking moves the count by one each time
    """
    first = create_user(mongo_db)
    second = create_user(mongo_db, name="Jamie Oliver")
    mirror = RecipeRepository(mongo_db).upsert_external(
        RecipeMapper.from_spoonacular(spoonacular_recipe(101, "Tomato Basil Pasta"))
    )
    recipe_id = str(mirror["_id"])
    assert mirror["likes_count"] == 40

    assert InteractionService.toggle_like(mongo_db, recipe_id, str(first["_id"])) == {"liked": True, "total_likes": 41}
    assert InteractionService.toggle_like(mongo_db, recipe_id, str(second["_id"]))["total_likes"] == 42
    assert InteractionService.toggle_like(mongo_db, recipe_id, str(first["_id"])) == {"liked": False, "total_likes": 41}
    assert RecipeRepository(mongo_db).get_by_id(recipe_id)["likes_count"] == 41
    assert InteractionService.user_summary(mongo_db, recipe_id, None)["total_likes"] == 41


def test_reviews_update_average(mongo_db):
    first = create_user(mongo_db)
    second = create_user(mongo_db, name="Jamie Oliver")
    recipe_id = str(create_recipe(mongo_db)["_id"])

    InteractionService.submit_review(mongo_db, recipe_id, first, 5, "Wonderful and easy")
    result = InteractionService.submit_review(mongo_db, recipe_id, second, 4, "Good, needed more salt")

    assert result["average_rating"] == 4.5
    assert result["total_ratings"] == 2
    assert result["review"]["user_name"] == "Jamie Oliver"
    recipe = RecipeRepository(mongo_db).get_by_id(recipe_id)
    assert (recipe["rating"], recipe["ratings_count"]) == (4.5, 2)

    summary = InteractionService.rating_summary(mongo_db, recipe_id)
    assert summary["distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 1}

    after = InteractionService.delete_review(mongo_db, recipe_id, first)
    assert after == {"average_rating": 4.0, "total_ratings": 1}
    with pytest.raises(NotFoundError):
        InteractionService.delete_review(mongo_db, recipe_id, first)


@pytest.mark.parametrize("rating,comment", [(0, "Long enough comment"), (6, "Long enough comment"), (3, "short")])
def test_review_validation(mongo_db, rating, comment):
    user = create_user(mongo_db)
    recipe_id = str(create_recipe(mongo_db)["_id"])

    with pytest.raises(ServiceValidationError):
        InteractionService.submit_review(mongo_db, recipe_id, user, rating, comment)


def test_user_summary(mongo_db):
    user = create_user(mongo_db)
    user_id = str(user["_id"])
    recipe_id = str(create_recipe(mongo_db)["_id"])
    InteractionService.toggle_like(mongo_db, recipe_id, user_id)
    InteractionService.submit_review(mongo_db, recipe_id, user, 3, "Decent weeknight meal")

    mine = InteractionService.user_summary(mongo_db, recipe_id, user_id)
    anonymous = InteractionService.user_summary(mongo_db, recipe_id, None)

    assert mine["has_liked"] is True
    assert mine["user_rating"] == 3
    assert anonymous["has_liked"] is False
    assert anonymous["total_likes"] == 1

    listed = InteractionService.list_reviews(mongo_db, recipe_id)
    assert listed["total"] == 1
    assert listed["reviews"][0]["comment"] == "Decent weeknight meal"


# =============================================================================
# USER SERVICE TESTS
# =============================================================================


def test_register_and_authenticate(mongo_db):
    email = unique_email("maria")
    user = UserService.register(mongo_db, "Maria Rossi", email, "secret123", "secret123")

    assert user.email == email
    assert user.role == "user"

    logged_in = UserService.authenticate(mongo_db, email.upper(), "secret123")
    assert logged_in.id == user.id
    assert logged_in.last_login_at is not None

    with pytest.raises(UnauthorizedError):
        UserService.authenticate(mongo_db, email, "wrong-password")
    with pytest.raises(ConflictError):
        UserService.register(mongo_db, "Maria Again", email, "secret123")


@pytest.mark.parametrize(
    "name,email,password,confirm",
    [
        ("Maria", "not-an-email", "secret123", None),
        ("Maria", "maria@example.com", "123", None),
        ("Maria", "maria@example.com", "x" * 73, None),
        ("Maria", "maria@example.com", "secret123", "different"),
        ("  ", "maria@example.com", "secret123", None),
    ],
)
def test_register_validation(mongo_db, name, email, password, confirm):
    with pytest.raises(ServiceValidationError):
        UserService.register(mongo_db, name, email, password, confirm)


def test_register_admin_email(mongo_db, monkeypatch):
    from app.config import settings

    email = unique_email("boss")
    monkeypatch.setattr(settings, "admin_emails", [email])

    assert UserService.register(mongo_db, "Boss", email, "secret123").role == "admin"


def test_inactive_user_cannot_log_in(mongo_db):
    email = unique_email("inactive")
    user = create_user(mongo_db, email=email)
    UserService.set_active(mongo_db, str(user["_id"]), False)

    with pytest.raises(UnauthorizedError):
        UserService.authenticate(mongo_db, email, "secret123")


def test_admin_cannot_deactivate_self(mongo_db):
    admin = create_user(mongo_db, role="admin")
    with pytest.raises(ForbiddenError):
        UserService.set_active(mongo_db, str(admin["_id"]), False, acting_user_id=str(admin["_id"]))


def test_profile_and_password(mongo_db):
    email = unique_email("profile")
    user_id = str(create_user(mongo_db, email=email)["_id"])

    updated = UserService.update_profile(mongo_db, user_id, UserUpdate(name="  New Name ", bio="Home cook"))
    assert updated.name == "New Name"
    assert updated.bio == "Home cook"

    with pytest.raises(UnauthorizedError):
        UserService.change_password(mongo_db, user_id, "wrong", "newsecret")
    UserService.change_password(mongo_db, user_id, "secret123", "newsecret")
    assert UserService.authenticate(mongo_db, email, "newsecret").id == user_id

    UserService.reset_password(mongo_db, user_id, "resetpass")
    assert UserService.authenticate(mongo_db, email, "resetpass").id == user_id

    assert UserService.delete_account(mongo_db, user_id) is True
    with pytest.raises(NotFoundError):
        UserService.get_profile(mongo_db, user_id)


def test_saved_recipes_resolve_local_and_external_ids(mongo_db, cache_service):
    user_id = str(create_user(mongo_db)["_id"])
    local = create_recipe(mongo_db, title="Local Stew")
    RecipeService.get_recipe(mongo_db, "spoonacular-101", cache_service)

    UserService.save_recipe(mongo_db, user_id, str(local["_id"]))
    saved = UserService.save_recipe(mongo_db, user_id, "spoonacular-101")
    assert saved == [str(local["_id"]), "spoonacular-101"]

    titles = [r["title"] for r in UserService.saved_recipes(mongo_db, user_id)]
    assert titles == ["Local Stew", "Tomato Basil Pasta"]

    assert UserService.unsave_recipe(mongo_db, user_id, str(local["_id"])) == ["spoonacular-101"]


def test_list_users(mongo_db):
    create_user(mongo_db, name="Alice")
    create_user(mongo_db, name="Bob")

    result = UserService.list_users(mongo_db, page=1, limit=1)

    assert result["total"] == 2
    assert len(result["users"]) == 1
    assert "password" not in result["users"][0]


# =============================================================================
# MEAL PLAN SERVICE TESTS
# =============================================================================


def test_create_meal_plan_for_week(mongo_db):
    plan, created = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 13))

    assert created is True
    assert plan["title"] == "Week of 2025-03-10"
    assert len(plan["days"]) == 7
    assert plan["days"][0]["breakfast"] == []
    assert plan["total_meals"] == 0

    same, created_again = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 16))
    assert created_again is False
    assert same["id"] == plan["id"]


def test_create_meal_plan_lost_race_returns_existing(mongo_db, monkeypatch):
    """
    Verifies:
    - When another request inserts the same week between lookup and insert,
      the unique index conflict resolves to the existing plan with created=False
    """
    repo = MealPlanRepository(mongo_db)
    repo.ensure_indexes()
    winner, _ = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 10))

    lookups = []
    real_find = MealPlanRepository.find_by_user_and_week

    def find_after_first_miss(self, user_id, week):
        lookups.append(week)
        return None if len(lookups) == 1 else real_find(self, user_id, week)

    monkeypatch.setattr(MealPlanRepository, "find_by_user_and_week", find_after_first_miss)

    plan, created = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 12))

    assert created is False
    assert plan["id"] == winner["id"]
    assert len(lookups) == 2
    assert repo.count({"user_id": "u1"}) == 1


def test_copy_meal_plan_from_previous_week(mongo_db):
    recipe_id = str(create_recipe(mongo_db, title="Lemon Chicken")["_id"])
    source, _ = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 3))
    MealPlanService.add_meal(mongo_db, source["id"], "u1", 2, "dinner", MealSlot(recipe_id=recipe_id, servings=2))

    copy, created = MealPlanService.create(
        mongo_db, "u1", week_start_date=date(2025, 3, 10), copy_from_week=date(2025, 3, 5)
    )

    assert created is True
    assert copy["total_meals"] == 1
    assert copy["days"][2]["dinner"][0]["recipe_name"] == "Lemon Chicken"

    with pytest.raises(NotFoundError):
        MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 17), copy_from_week=date(2024, 1, 1))


def test_add_and_remove_meals(mongo_db):
    recipe = create_recipe(mongo_db, title="Lemon Chicken")
    plan, _ = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 10))

    plan = MealPlanService.add_meal(mongo_db, plan["id"], "u1", 0, "lunch", MealSlot(recipe_id=str(recipe["_id"])))
    assert plan["days"][0]["lunch"][0]["recipe_name"] == "Lemon Chicken"
    assert plan["days"][0]["lunch"][0]["recipe_image"] == recipe["image"]

    with pytest.raises(NotFoundError):
        MealPlanService.remove_meal(mongo_db, plan["id"], "u1", 0, "lunch", 3)
    with pytest.raises(ServiceValidationError):
        MealPlanService.remove_meal(mongo_db, plan["id"], "u1", 0, "brunch", 0)
    with pytest.raises(ServiceValidationError):
        MealPlanService.add_meal(mongo_db, plan["id"], "u1", 0, "brunch", MealSlot(recipe_id="x"))

    plan = MealPlanService.remove_meal(mongo_db, plan["id"], "u1", 0, "lunch", 0)
    assert plan["total_meals"] == 0


def test_meal_plan_is_private(mongo_db):
    plan, _ = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 10))

    with pytest.raises(NotFoundError):
        MealPlanService.get(mongo_db, plan["id"], "u2")
    with pytest.raises(NotFoundError):
        MealPlanService.delete(mongo_db, plan["id"], "u2")
    assert MealPlanService.delete(mongo_db, plan["id"], "u1") is True


def test_update_meal_plan_requires_seven_days(mongo_db):
    plan, _ = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 10))

    with pytest.raises(ServiceValidationError):
        MealPlanService.update(mongo_db, plan["id"], "u1", MealPlanUpdate(days=[DayPlan(date=date(2025, 3, 10))]))

    days = [DayPlan(date=date(2025, 3, 10 + i)) for i in range(7)]
    updated = MealPlanService.update(mongo_db, plan["id"], "u1", MealPlanUpdate(title="Busy week", days=days))
    assert updated["title"] == "Busy week"
    assert len(updated["days"]) == 7


def test_list_meal_plans(mongo_db):
    MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 3), is_template=True)
    MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 10))

    assert len(MealPlanService.list(mongo_db, "u1")) == 2
    assert len(MealPlanService.list(mongo_db, "u1", templates=True)) == 1
    assert len(MealPlanService.list(mongo_db, "u1", week_start_date=date(2025, 3, 12))) == 1
    assert MealPlanService.list(mongo_db, "u2") == []


# =============================================================================
# GROCERY SERVICE TESTS
# =============================================================================


def _planned_week(db):
    chicken = create_recipe(db, title="Lemon Chicken", servings=2)
    lemonade = create_recipe(
        db,
        title="Lemonade",
        servings=1,
        extended_ingredients=[{"name": "lemons", "amount": 2, "unit": ""}],
    )
    plan, _ = MealPlanService.create(db, "u1", week_start_date=date(2025, 3, 10))
    MealPlanService.add_meal(db, plan["id"], "u1", 0, "dinner", MealSlot(recipe_id=str(chicken["_id"]), servings=4))
    MealPlanService.add_meal(db, plan["id"], "u1", 1, "lunch", MealSlot(recipe_id=str(chicken["_id"]), servings=2))
    MealPlanService.add_meal(db, plan["id"], "u1", 1, "snacks", MealSlot(recipe_id=str(lemonade["_id"])))
    return plan


def test_generate_grocery_list_scales_and_merges(mongo_db):
    plan = _planned_week(mongo_db)

    result = GroceryService.generate_from_meal_plan(mongo_db, plan["id"], "u1")

    items = {i["name"]: i for i in result["items"]}
    assert items["chicken breast"]["amount"] == 6
    assert items["chicken breast"]["unit"] == "piece"
    assert items["lemon"]["amount"] == 5
    assert items["lemon"]["recipes"] == ["Lemon Chicken", "Lemonade"]
    assert items["salt"]["unit"] == "tsp"
    assert [i["name"] for i in result["items"]] == ["salt", "chicken breast", "lemon"]
    assert list(result["categories"]) == ["Herbs & Spices", "Meat & Seafood", "Produce"]
    assert result["recipes_count"] == 2

    current = GroceryService.get_current(mongo_db, "u1")
    assert current["meal_plan_id"] == plan["id"]
    assert MealPlanRepository(mongo_db).get_by_id(plan["id"])["shopping_list_generated"] is True


def test_generate_grocery_list_without_staples(mongo_db):
    plan = _planned_week(mongo_db)

    result = GroceryService.generate_from_meal_plan(
        mongo_db, plan["id"], "u1", exclude_staples=True, categorize=False, replace_current=False
    )

    assert "salt" not in [i["name"] for i in result["items"]]
    assert "categories" not in result
    assert GroceryListRepository(mongo_db).find_by_user("u1") is None


def test_generate_grocery_list_errors(mongo_db):
    plan, _ = MealPlanService.create(mongo_db, "u1", week_start_date=date(2025, 3, 10))

    with pytest.raises(ServiceValidationError):
        GroceryService.generate_from_meal_plan(mongo_db, plan["id"], "u1")
    with pytest.raises(NotFoundError):
        GroceryService.generate_from_meal_plan(mongo_db, plan["id"], "u2")


def test_current_grocery_list(mongo_db):
    assert GroceryService.get_current(mongo_db, "u1") == {"user_id": "u1", "items": [], "meal_plan_id": None}

    current = GroceryService.add_items(mongo_db, "u1", [GroceryItem(name="basil"), GroceryItem(name="rice", category="Grains")])

    assert [i["category"] for i in current["items"]] == ["Herbs & Spices", "Grains"]
    assert GroceryService.clear(mongo_db, "u1") is True
    assert GroceryService.clear(mongo_db, "u1") is False


def test_saved_grocery_lists(mongo_db):
    saved = GroceryService.save(mongo_db, "u1", " Party ", [GroceryItem(name="chips"), GroceryItem(name="salsa")])

    assert saved["name"] == "Party"
    assert [s["id"] for s in GroceryService.list_saved(mongo_db, "u1")] == [saved["id"]]

    toggled = GroceryService.toggle_item(mongo_db, saved["id"], "u1", 1, True)
    assert [i["checked"] for i in toggled["items"]] == [False, True]
    with pytest.raises(NotFoundError):
        GroceryService.toggle_item(mongo_db, saved["id"], "u1", 5, True)
    with pytest.raises(NotFoundError):
        GroceryService.get_saved(mongo_db, saved["id"], "u2")

    assert GroceryService.delete_saved(mongo_db, saved["id"], "u1") is True
    with pytest.raises(NotFoundError):
        GroceryService.delete_saved(mongo_db, saved["id"], "u1")


# =============================================================================
# AI / ADMIN / CONTACT SERVICE TESTS
# =============================================================================


def _fake_vision(monkeypatch, ingredients):
    monkeypatch.setattr(
        vision_adapter,
        "extract_ingredients",
        lambda image: {"ingredients": ingredients, "raw": "", "model": "test-model"},
    )


def test_analyze_fridge_suggests_recipes(mongo_db, cache_service, monkeypatch):
    _fake_vision(monkeypatch, ["egg", "cheese"])

    result = AIService.analyze_fridge("data:image/png;base64,AAAA", {}, cache_service, limiter=RateLimiter(5, 60))

    assert [i["name"] for i in result["ingredients"]] == ["egg", "cheese"]
    assert result["ingredients"][0]["category"] == "Dairy & Eggs"
    suggestion = result["suggestions"][0]
    assert suggestion["id"] == "spoonacular-201"
    assert suggestion["match_percentage"] == 67
    assert "Pick up chives to make Cheesy Omelette." in result["tips"]


def test_analyze_fridge_filters_allergens(mongo_db, cache_service, monkeypatch):
    _fake_vision(monkeypatch, ["egg", "cheese"])

    result = AIService.analyze_fridge("img", {"allergies": ["Cheese"]}, cache_service, limiter=RateLimiter(5, 60))

    assert result["suggestions"] == []
    assert "No matching recipes found; try adding pantry staples." in result["tips"]


def test_analyze_fridge_failure_returns_tips(mongo_db, cache_service, monkeypatch):
    def broken(image):
        raise ExternalServiceError("vision down")

    monkeypatch.setattr(vision_adapter, "extract_ingredients", broken)

    result = AIService.analyze_fridge("img", None, cache_service, limiter=RateLimiter(5, 60))

    assert result["ingredients"] == []
    assert result["tips"][0] == "We could not recognise ingredients in this photo."


def test_analyze_fridge_is_rate_limited(mongo_db, cache_service, monkeypatch):
    _fake_vision(monkeypatch, [])
    limiter = RateLimiter(1, 60)

    AIService.analyze_fridge("img", None, cache_service, client_key="1.2.3.4", limiter=limiter)
    with pytest.raises(RateLimitExceededError):
        AIService.analyze_fridge("img", None, cache_service, client_key="1.2.3.4", limiter=limiter)


def test_ai_search_requires_instructions(mongo_db):
    create_recipe(mongo_db, title="Lemon Chicken")
    create_recipe(mongo_db, title="Lemon Mystery", analyzed_instructions=[])

    result = AIService.search(mongo_db, {"query": "lemon"})

    assert [r["title"] for r in result["recipes"]] == ["Lemon Chicken"]


def test_generate_recipes(monkeypatch):
    monkeypatch.setattr(
        vision_adapter, "generate_recipe_ideas", lambda ingredients, diets, minutes, count: [{"title": "Egg Fried Rice"}]
    )

    assert AIService.generate_recipes(["egg", " rice "]) == [{"title": "Egg Fried Rice", "source": "ai"}]
    with pytest.raises(ServiceValidationError):
        AIService.generate_recipes(["  "])


def test_admin_stats(mongo_db, cache_service):
    user = create_user(mongo_db)
    UserRepository(mongo_db).touch_login(user["_id"])
    create_recipe(mongo_db, is_pending=True)

    stats = AdminService.stats(mongo_db, cache_service)

    assert stats["users"] == {"total": 1, "active": 1, "online": 1}
    assert stats["recipes"]["total"] == 1
    assert stats["recipes"]["pending"] == 1
    assert stats["reviews"]["total"] == 0
    assert stats["quota"]["used"] == 0


def test_contact_submit(mongo_db):
    message = ContactService.submit(mongo_db, "Sarah", "Sarah@Example.com", "Hello", "Great recipes!")

    assert message["email"] == "sarah@example.com"
    assert message["status"] == "new"
    with pytest.raises(ServiceValidationError):
        ContactService.submit(mongo_db, "Sarah", "sarah@example.com", "Hello", "   ")
