"""Current user profile and saved recipe routes"""

from fastapi import APIRouter, Depends, status
from typing import Any, Dict, List
import logging

from api.dependencies import get_current_user, get_db
from api.responses import success_response
from domain.schemas.user_schemas import PasswordChangeRequest, UserResponse, UserUpdate
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger("smartplates.api.users")


@router.get("/me", response_model=UserResponse)
def get_me(user=Depends(get_current_user), db=Depends(get_db)):
    return UserService.get_profile(db, str(user["_id"]))


@router.put("/me", response_model=UserResponse)
def update_me(body: UserUpdate, user=Depends(get_current_user), db=Depends(get_db)):
    """Update name, avatar, bio, dietary restrictions or favourite categories."""
    return UserService.update_profile(db, str(user["_id"]), body)


@router.post("/me/password")
def change_password(body: PasswordChangeRequest, user=Depends(get_current_user), db=Depends(get_db)):
    UserService.change_password(db, str(user["_id"]), body.current_password, body.new_password)
    return success_response(message="Password updated")


@router.delete("/me")
def delete_me(user=Depends(get_current_user), db=Depends(get_db)):
    UserService.delete_account(db, str(user["_id"]))
    return {"status": "ok", "deleted": str(user["_id"])}


@router.get("/me/recipes", response_model=List[Dict[str, Any]])
def my_recipes(user=Depends(get_current_user), db=Depends(get_db)):
    """Recipes the user authored or imported."""
    return UserService.created_recipes(db, str(user["_id"]))


@router.get("/me/saved-recipes", response_model=List[Dict[str, Any]])
def saved_recipes(user=Depends(get_current_user), db=Depends(get_db)):
    return UserService.saved_recipes(db, str(user["_id"]))


@router.post("/me/saved-recipes/{recipe_id}", status_code=status.HTTP_201_CREATED)
def save_recipe(recipe_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    saved = UserService.save_recipe(db, str(user["_id"]), recipe_id)
    return {"saved": True, "saved_recipes": saved}


@router.delete("/me/saved-recipes/{recipe_id}")
def unsave_recipe(recipe_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    saved = UserService.unsave_recipe(db, str(user["_id"]), recipe_id)
    return {"saved": False, "saved_recipes": saved}
