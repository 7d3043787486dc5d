from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
import logging

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from adapters.mongo_adapter import to_public
from core.utils.helpers import week_start
from domain.enums import MealType
from domain.schemas.plan_schemas import MealPlanUpdate, MealSlot
from repositories import MealPlanRepository, RecipeRepository

logger = logging.getLogger("smartplates.meal_plans")

MEAL_TYPES = [m.value for m in MealType]
DAYS_PER_WEEK = 7


def _midnight(day: date) -> datetime:
    # BSON has no date type
    return datetime(day.year, day.month, day.day)


def _empty_day(day: date) -> Dict[str, Any]:
    return {"date": _midnight(day), **{m: [] for m in MEAL_TYPES}, "daily_notes": ""}


def _empty_week(monday: date) -> List[Dict[str, Any]]:
    return [_empty_day(monday + timedelta(days=i)) for i in range(DAYS_PER_WEEK)]


def _require_plan(db, plan_id: str, user_id: str) -> Dict[str, Any]:
    plan = MealPlanRepository(db).get_by_id_and_user(plan_id, user_id)
    if not plan:
        raise NotFoundError(f"Meal plan {plan_id} not found")
    return plan


def total_meals(plan: Dict[str, Any]) -> int:
    return sum(len(day.get(m) or []) for day in plan.get("days") or [] for m in MEAL_TYPES)


class MealPlanService:
    """Weekly meal plans, one per user and week"""

    @staticmethod
    def create(
        db,
        user_id: str,
        week_start_date: Optional[date] = None,
        title: Optional[str] = None,
        is_template: bool = False,
        tags: Optional[List[str]] = None,
        copy_from_week: Optional[date] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Create the plan for the week containing ``week_start_date`` (today by default).

        Returns (plan, created). An existing plan for that week is returned unchanged
        with created=False.
        """
        repo = MealPlanRepository(db)
        monday = week_start(week_start_date or datetime.utcnow().date())
        existing = repo.find_by_user_and_week(user_id, _midnight(monday))
        if existing:
            logger.info(f"meal_plan_exists user_id={user_id} week={monday}")
            return MealPlanService.enrich(db, existing), False

        days = _empty_week(monday)
        if copy_from_week:
            source = repo.find_by_user_and_week(user_id, _midnight(week_start(copy_from_week)))
            if not source:
                raise NotFoundError(f"No meal plan for the week of {week_start(copy_from_week)}")
            for target, copied in zip(days, source.get("days") or []):
                for meal_type in MEAL_TYPES:
                    target[meal_type] = list(copied.get(meal_type) or [])
                target["daily_notes"] = copied.get("daily_notes", "")

        try:
            plan = repo.create_plan(
                {
                    "user_id": str(user_id),
                    "week_start_date": _midnight(monday),
                    "title": (title or "").strip() or f"Week of {monday.isoformat()}",
                    "days": days,
                    "is_template": is_template,
                    "tags": tags or [],
                    "notes": "",
                    "shopping_list_generated": False,
                }
            )
        except ConflictError:
            # another request created this week's plan after the lookup above
            existing = repo.find_by_user_and_week(user_id, _midnight(monday))
            if not existing:
                raise
            logger.info(f"meal_plan_exists user_id={user_id} week={monday} concurrent=True")
            return MealPlanService.enrich(db, existing), False
        logger.info(f"meal_plan_created plan_id={plan['_id']} user_id={user_id} week={monday}")
        return MealPlanService.enrich(db, plan), True

    @staticmethod
    def list(
        db, user_id: str, week_start_date: Optional[date] = None, templates: bool = False
    ) -> List[Dict[str, Any]]:
        repo = MealPlanRepository(db)
        if week_start_date:
            plan = repo.find_by_user_and_week(user_id, _midnight(week_start(week_start_date)))
            plans = [plan] if plan else []
        elif templates:
            plans = repo.find_templates(user_id)
        else:
            plans = repo.find_by_user(user_id)
        return [MealPlanService.summary(p) for p in plans]

    @staticmethod
    def summary(plan: Dict[str, Any]) -> Dict[str, Any]:
        public = to_public(plan)
        public["total_meals"] = total_meals(plan)
        return public

    @staticmethod
    def get(db, plan_id: str, user_id: str) -> Dict[str, Any]:
        return MealPlanService.enrich(db, _require_plan(db, plan_id, user_id))

    @staticmethod
    def update(db, plan_id: str, user_id: str, data: MealPlanUpdate) -> Dict[str, Any]:
        _require_plan(db, plan_id, user_id)
        fields = data.model_dump(exclude_unset=True)
        if "days" in fields:
            if fields["days"] is None or len(fields["days"]) != DAYS_PER_WEEK:
                raise ServiceValidationError(f"A meal plan must have exactly {DAYS_PER_WEEK} days")
            for day in fields["days"]:
                day["date"] = _midnight(day["date"])
        if not fields:
            return MealPlanService.get(db, plan_id, user_id)
        plan = MealPlanRepository(db).update(plan_id, fields)
        logger.info(f"meal_plan_updated plan_id={plan_id} fields={sorted(fields)}")
        return MealPlanService.enrich(db, plan)

    @staticmethod
    def delete(db, plan_id: str, user_id: str) -> bool:
        if not MealPlanRepository(db).delete_for_user(plan_id, user_id):
            raise NotFoundError(f"Meal plan {plan_id} not found")
        logger.info(f"meal_plan_deleted plan_id={plan_id} user_id={user_id}")
        return True

    @staticmethod
    def add_meal(db, plan_id: str, user_id: str, day_index: int, meal_type: str, slot: MealSlot) -> Dict[str, Any]:
        plan = _require_plan(db, plan_id, user_id)
        try:
            meal_type = MealType(meal_type).value
        except ValueError:
            raise ServiceValidationError(f"Unknown meal type {meal_type}")
        if not 0 <= day_index < DAYS_PER_WEEK:
            raise ServiceValidationError("Day index must be between 0 and 6")
        days = plan["days"]
        days[day_index].setdefault(meal_type, []).append(slot.model_dump())
        updated = MealPlanRepository(db).update(plan_id, {"days": days})
        logger.info(f"meal_added plan_id={plan_id} day={day_index} meal_type={meal_type}")
        return MealPlanService.enrich(db, updated)

    @staticmethod
    def remove_meal(db, plan_id: str, user_id: str, day_index: int, meal_type: str, meal_index: int) -> Dict[str, Any]:
        plan = _require_plan(db, plan_id, user_id)
        try:
            meal_type = MealType(meal_type).value
        except ValueError:
            raise ServiceValidationError(f"Unknown meal type {meal_type}")
        if not 0 <= day_index < DAYS_PER_WEEK:
            raise ServiceValidationError("Day index must be between 0 and 6")
        meals = plan["days"][day_index].get(meal_type) or []
        if not 0 <= meal_index < len(meals):
            raise NotFoundError("Meal not found in this slot")
        meals.pop(meal_index)
        plan["days"][day_index][meal_type] = meals
        updated = MealPlanRepository(db).update(plan_id, {"days": plan["days"]})
        logger.info(f"meal_removed plan_id={plan_id} day={day_index} meal_type={meal_type} index={meal_index}")
        return MealPlanService.enrich(db, updated)

    @staticmethod
    def enrich(db, plan: Dict[str, Any]) -> Dict[str, Any]:
        """Fill missing recipe names and images from local recipes."""
        slots = [
            slot
            for day in plan.get("days") or []
            for m in MEAL_TYPES
            for slot in day.get(m) or []
            if not slot.get("recipe_name") or not slot.get("recipe_image")
        ]
        if slots:
            recipes = {
                str(r["_id"]): r for r in RecipeRepository(db).get_many([s.get("recipe_id") for s in slots])
            }
            for slot in slots:
                recipe = recipes.get(str(slot.get("recipe_id")))
                if recipe:
                    slot["recipe_name"] = slot.get("recipe_name") or recipe.get("title", "")
                    slot["recipe_image"] = slot.get("recipe_image") or recipe.get("image")
        return MealPlanService.summary(plan)
