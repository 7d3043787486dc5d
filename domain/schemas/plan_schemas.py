import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.enums import MealType


class MealSlot(BaseModel):
    recipe_id: str = Field(..., min_length=1)
    recipe_name: str = ""
    recipe_image: Optional[str] = None
    servings: int = Field(default=1, ge=1, le=20)
    notes: str = Field(default="", max_length=500)
    cooking_time: int = Field(default=0, ge=0, le=480)
    prep_time: int = Field(default=0, ge=0, le=240)


class DayPlan(BaseModel):
    date: datetime.date
    breakfast: List[MealSlot] = []
    lunch: List[MealSlot] = []
    dinner: List[MealSlot] = []
    snacks: List[MealSlot] = []
    daily_notes: str = Field(default="", max_length=1000)


class MealPlanCreate(BaseModel):
    week_start_date: Optional[datetime.date] = None
    title: Optional[str] = Field(default=None, max_length=100)
    is_template: bool = False
    tags: List[str] = []
    copy_from_week: Optional[datetime.date] = None


class MealPlanUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    days: Optional[List[DayPlan]] = None
    is_template: Optional[bool] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class AddMealRequest(BaseModel):
    day_index: int = Field(..., ge=0, le=6)
    meal_type: MealType
    meal: MealSlot
