from collections import OrderedDict
from typing import Any, Dict, List, Optional
import logging

from app.exceptions import NotFoundError, ServiceValidationError
from adapters.mongo_adapter import to_public
from core.utils.helpers import categorize_ingredient, is_staple, normalize_ingredient, normalize_unit
from domain.mappers.recipe_mapper import RecipeMapper
from domain.schemas.grocery_schemas import GroceryItem
from repositories import (
    GroceryListRepository,
    MealPlanRepository,
    RecipeRepository,
    SavedGroceryListRepository,
)
from services.meal_plan_service import MEAL_TYPES

logger = logging.getLogger("smartplates.grocery")


def _load_recipes(db, recipe_ids: List[str]) -> Dict[str, Dict[str, Any]]:
    """Resolve local ids and spoonacular-<n> ids to recipe documents."""
    repo = RecipeRepository(db)
    found = {str(r["_id"]): r for r in repo.get_many(recipe_ids)}
    for recipe_id in recipe_ids:
        if recipe_id in found:
            continue
        spoonacular_id = RecipeMapper.parse_external_id(recipe_id)
        if spoonacular_id is not None:
            mirror = repo.get_by_spoonacular_id(spoonacular_id)
            if mirror:
                found[recipe_id] = mirror
    return found


def _sorted_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(items, key=lambda i: (i.get("category") or "Other", i["name"]))


def group_by_category(items: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = OrderedDict()
    for item in _sorted_items(items):
        grouped.setdefault(item.get("category") or "Other", []).append(item)
    return grouped


def _public_list(doc: Optional[Dict[str, Any]], user_id: str) -> Dict[str, Any]:
    if not doc:
        return {"user_id": str(user_id), "items": [], "meal_plan_id": None}
    return to_public(doc)


class GroceryService:
    """Grocery list generation and saved lists"""

    @staticmethod
    def generate_from_meal_plan(
        db,
        plan_id: str,
        user_id: str,
        exclude_staples: bool = False,
        categorize: bool = True,
        replace_current: bool = True,
    ) -> Dict[str, Any]:
        """
        Aggregate the ingredients of every planned meal into one list.

        Each recipe's ingredients are scaled by planned servings over recipe servings,
        and lines are merged on (normalized name, unit).
        """
        plans = MealPlanRepository(db)
        plan = plans.get_by_id_and_user(plan_id, user_id)
        if not plan:
            raise NotFoundError(f"Meal plan {plan_id} not found")

        planned_servings: Dict[str, int] = {}
        for day in plan.get("days") or []:
            for meal_type in MEAL_TYPES:
                for slot in day.get(meal_type) or []:
                    rid = str(slot.get("recipe_id") or "")
                    if rid:
                        planned_servings[rid] = planned_servings.get(rid, 0) + int(slot.get("servings") or 1)
        if not planned_servings:
            raise ServiceValidationError("This meal plan has no meals")

        recipes = _load_recipes(db, list(planned_servings))
        lines: Dict[str, Dict[str, Any]] = {}
        for recipe_id, servings in planned_servings.items():
            recipe = recipes.get(recipe_id)
            if not recipe:
                logger.warning(f"grocery_recipe_missing plan_id={plan_id} recipe_id={recipe_id}")
                continue
            scale = servings / max(int(recipe.get("servings") or 1), 1)
            for ingredient in recipe.get("extended_ingredients") or []:
                name = normalize_ingredient(ingredient.get("name", "")) or (ingredient.get("name") or "").strip().lower()
                if not name or (exclude_staples and is_staple(name)):
                    continue
                unit = normalize_unit(ingredient.get("unit"))
                key = f"{name}|{unit}"
                line = lines.setdefault(
                    key,
                    {
                        "name": name,
                        "amount": 0.0,
                        "unit": unit,
                        "category": categorize_ingredient(name) if categorize else None,
                        "checked": False,
                        "recipes": [],
                    },
                )
                line["amount"] += float(ingredient.get("amount") or 0) * scale
                title = recipe.get("title", "")
                if title and title not in line["recipes"]:
                    line["recipes"].append(title)

        items = _sorted_items([{**line, "amount": round(line["amount"], 2)} for line in lines.values()])
        if replace_current:
            GroceryListRepository(db).replace_items(user_id, items, meal_plan_id=str(plan["_id"]))
        plans.update(plan["_id"], {"shopping_list_generated": True})
        logger.info(f"shopping_list_generated plan_id={plan_id} user_id={user_id} items={len(items)}")

        result = {
            "meal_plan_id": str(plan["_id"]),
            "items": items,
            "total_items": len(items),
            "recipes_count": len(recipes),
        }
        if categorize:
            result["categories"] = group_by_category(items)
        return result

    @staticmethod
    def get_current(db, user_id: str) -> Dict[str, Any]:
        return _public_list(GroceryListRepository(db).find_by_user(user_id), user_id)

    @staticmethod
    def add_items(db, user_id: str, items: List[GroceryItem]) -> Dict[str, Any]:
        docs = []
        for item in items:
            doc = item.model_dump()
            doc["category"] = doc.get("category") or categorize_ingredient(doc["name"])
            docs.append(doc)
        updated = GroceryListRepository(db).add_items(user_id, docs)
        logger.info(f"grocery_items_added user_id={user_id} count={len(docs)}")
        return _public_list(updated, user_id)

    @staticmethod
    def clear(db, user_id: str) -> bool:
        cleared = GroceryListRepository(db).clear(user_id)
        logger.info(f"grocery_list_cleared user_id={user_id} existed={cleared}")
        return cleared

    # ------------------ Saved lists ------------------
    @staticmethod
    def save(
        db, user_id: str, name: str, items: List[GroceryItem], meal_plan_id: Optional[str] = None
    ) -> Dict[str, Any]:
        doc = SavedGroceryListRepository(db).save(
            user_id, name.strip(), [i.model_dump() for i in items], meal_plan_id
        )
        logger.info(f"grocery_list_saved list_id={doc['_id']} user_id={user_id}")
        return to_public(doc)

    @staticmethod
    def list_saved(db, user_id: str) -> List[Dict[str, Any]]:
        return [to_public(d) for d in SavedGroceryListRepository(db).find_by_user(user_id)]

    @staticmethod
    def get_saved(db, list_id: str, user_id: str) -> Dict[str, Any]:
        doc = SavedGroceryListRepository(db).get_for_user(list_id, user_id)
        if not doc:
            raise NotFoundError(f"Grocery list {list_id} not found")
        return to_public(doc)

    @staticmethod
    def delete_saved(db, list_id: str, user_id: str) -> bool:
        if not SavedGroceryListRepository(db).delete_for_user(list_id, user_id):
            raise NotFoundError(f"Grocery list {list_id} not found")
        logger.info(f"grocery_list_deleted list_id={list_id} user_id={user_id}")
        return True

    @staticmethod
    def toggle_item(db, list_id: str, user_id: str, index: int, checked: bool) -> Dict[str, Any]:
        current = GroceryService.get_saved(db, list_id, user_id)
        if not 0 <= index < len(current.get("items") or []):
            raise NotFoundError(f"Item {index} not found in grocery list {list_id}")
        doc = SavedGroceryListRepository(db).set_item_checked(list_id, user_id, index, checked)
        return to_public(doc)
