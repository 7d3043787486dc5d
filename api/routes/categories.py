"""Recipe category routes"""

from fastapi import APIRouter, Depends
import logging

from api.dependencies import get_db
from services.recipe_service import RecipeService

router = APIRouter(tags=["Categories"])
logger = logging.getLogger("smartplates.api.categories")


@router.get("/categories")
def list_categories(db=Depends(get_db)):
    """Distinct cuisines, dish types and diets across stored recipes."""
    return RecipeService.categories(db)
