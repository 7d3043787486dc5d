"""Weekly meal plan routes"""

from datetime import date
from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
import logging

from api.dependencies import get_current_user, get_db
from domain.schemas.plan_schemas import AddMealRequest, MealPlanCreate, MealPlanUpdate
from services.meal_plan_service import MealPlanService

router = APIRouter(prefix="/meal-plans", tags=["Meal Plans"])
logger = logging.getLogger("smartplates.api.meal_plans")


@router.get("")
def list_meal_plans(
    week_start: Optional[date] = Query(default=None, description="Any day of the wanted week"),
    templates: bool = Query(default=False),
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    return MealPlanService.list(db, str(user["_id"]), week_start, templates)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meal_plan(
    body: MealPlanCreate,
    response: Response,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    """Create this week's plan (or the week of week_start_date); 200 with the existing plan if present."""
    plan, created = MealPlanService.create(
        db,
        str(user["_id"]),
        body.week_start_date,
        body.title,
        body.is_template,
        body.tags,
        body.copy_from_week,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return plan


@router.get("/{plan_id}")
def get_meal_plan(plan_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return MealPlanService.get(db, plan_id, str(user["_id"]))


@router.put("/{plan_id}")
def update_meal_plan(plan_id: str, body: MealPlanUpdate, user=Depends(get_current_user), db=Depends(get_db)):
    return MealPlanService.update(db, plan_id, str(user["_id"]), body)


@router.delete("/{plan_id}")
def delete_meal_plan(plan_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    MealPlanService.delete(db, plan_id, str(user["_id"]))
    return {"status": "ok", "deleted": plan_id}


@router.post("/{plan_id}/meals")
def add_meal(plan_id: str, body: AddMealRequest, user=Depends(get_current_user), db=Depends(get_db)):
    return MealPlanService.add_meal(db, plan_id, str(user["_id"]), body.day_index, body.meal_type, body.meal)


@router.delete("/{plan_id}/meals/{day_index}/{meal_type}/{meal_index}")
def remove_meal(
    plan_id: str,
    day_index: int,
    meal_type: str,
    meal_index: int,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    return MealPlanService.remove_meal(db, plan_id, str(user["_id"]), day_index, meal_type, meal_index)
