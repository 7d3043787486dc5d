"""Pydantic schemas for grocery lists."""

from pydantic import BaseModel, Field
from typing import List, Optional


class GroceryItem(BaseModel):
    """Individual line of a grocery list."""

    name: str = Field(..., min_length=1)
    amount: float = Field(default=0, ge=0)
    unit: str = ""
    category: Optional[str] = None
    checked: bool = False
    recipes: List[str] = []


class GroceryItemsRequest(BaseModel):
    items: List[GroceryItem] = Field(..., min_length=1)


class GenerateGroceryListRequest(BaseModel):
    exclude_staples: bool = False
    categorize: bool = True
    replace_current: bool = True


class SavedGroceryListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    items: List[GroceryItem] = Field(..., min_length=1)
    meal_plan_id: Optional[str] = None


class ItemCheckRequest(BaseModel):
    checked: bool
