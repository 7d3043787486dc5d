"""Grocery list routes: the current list and saved lists"""

from fastapi import APIRouter, Depends, status
from typing import Optional
import logging

from api.dependencies import get_current_user, get_db
from domain.schemas.grocery_schemas import (
    GenerateGroceryListRequest,
    GroceryItemsRequest,
    ItemCheckRequest,
    SavedGroceryListCreate,
)
from services.grocery_service import GroceryService

router = APIRouter(prefix="/grocery-list", tags=["Grocery"])
saved_router = APIRouter(prefix="/saved-grocery-lists", tags=["Grocery"])
logger = logging.getLogger("smartplates.api.grocery")


@router.get("")
def get_grocery_list(user=Depends(get_current_user), db=Depends(get_db)):
    return GroceryService.get_current(db, str(user["_id"]))


@router.post("")
def add_grocery_items(body: GroceryItemsRequest, user=Depends(get_current_user), db=Depends(get_db)):
    return GroceryService.add_items(db, str(user["_id"]), body.items)


@router.delete("")
def clear_grocery_list(user=Depends(get_current_user), db=Depends(get_db)):
    return {"cleared": GroceryService.clear(db, str(user["_id"]))}


@router.post("/from-meal-plan/{plan_id}")
def generate_from_meal_plan(
    plan_id: str,
    body: Optional[GenerateGroceryListRequest] = None,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    """Build the list from every meal in the plan, scaled to planned servings."""
    options = body or GenerateGroceryListRequest()
    return GroceryService.generate_from_meal_plan(
        db,
        plan_id,
        str(user["_id"]),
        exclude_staples=options.exclude_staples,
        categorize=options.categorize,
        replace_current=options.replace_current,
    )


@saved_router.get("")
def list_saved_lists(user=Depends(get_current_user), db=Depends(get_db)):
    return GroceryService.list_saved(db, str(user["_id"]))


@saved_router.post("", status_code=status.HTTP_201_CREATED)
def save_list(body: SavedGroceryListCreate, user=Depends(get_current_user), db=Depends(get_db)):
    return GroceryService.save(db, str(user["_id"]), body.name, body.items, body.meal_plan_id)


@saved_router.get("/{list_id}")
def get_saved_list(list_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return GroceryService.get_saved(db, list_id, str(user["_id"]))


@saved_router.delete("/{list_id}")
def delete_saved_list(list_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    GroceryService.delete_saved(db, list_id, str(user["_id"]))
    return {"status": "ok", "deleted": list_id}


@saved_router.patch("/{list_id}/items/{index}")
def check_item(
    list_id: str,
    index: int,
    body: ItemCheckRequest,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    return GroceryService.toggle_item(db, list_id, str(user["_id"]), index, body.checked)
