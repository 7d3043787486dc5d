"""Pydantic schemas for recipe documents."""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Dict, Any
from datetime import datetime

DEFAULT_RECIPE_IMAGE = "/placeholder-recipe.svg"


class RecipeIngredient(BaseModel):
    """Embedded ingredient in a recipe."""

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    amount: float = Field(default=0, ge=0)
    unit: str = ""
    notes: str = ""


class InstructionStep(BaseModel):
    number: int = Field(..., ge=1)
    step: str = Field(..., min_length=1)


class InstructionBlock(BaseModel):
    """Named group of steps ("" for the main method)."""

    name: str = ""
    steps: List[InstructionStep] = []


class Nutrient(BaseModel):
    name: str
    amount: float
    unit: str = ""


class RecipeNutrition(BaseModel):
    nutrients: List[Nutrient] = []


class RecipeBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    summary: str = ""
    image: str = DEFAULT_RECIPE_IMAGE
    ready_in_minutes: int = Field(default=30, ge=1, le=1440)
    servings: int = Field(default=4, ge=1, le=100)
    extended_ingredients: List[RecipeIngredient] = []
    analyzed_instructions: List[InstructionBlock] = []
    cuisines: List[str] = []
    dish_types: List[str] = []
    diets: List[str] = []
    nutrition: Optional[RecipeNutrition] = None


class RecipeCreate(RecipeBase):
    """Body of POST /recipes."""

    extended_ingredients: List[RecipeIngredient] = Field(..., min_length=1)
    analyzed_instructions: List[InstructionBlock] = Field(..., min_length=1)
    is_published: bool = True


class RecipeUpdate(BaseModel):
    """Partial update; only provided fields are written."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    image: Optional[str] = None
    ready_in_minutes: Optional[int] = Field(default=None, ge=1, le=1440)
    servings: Optional[int] = Field(default=None, ge=1, le=100)
    extended_ingredients: Optional[List[RecipeIngredient]] = None
    analyzed_instructions: Optional[List[InstructionBlock]] = None
    cuisines: Optional[List[str]] = None
    dish_types: Optional[List[str]] = None
    diets: Optional[List[str]] = None
    is_published: Optional[bool] = None
    moderation_notes: Optional[str] = None


class RecipeResponse(RecipeBase):
    """Public recipe as returned by the API."""

    model_config = ConfigDict(extra="allow")

    id: str
    spoonacular_id: Optional[int] = None
    rating: float = Field(default=0, ge=0, le=5)
    ratings_count: int = 0
    likes_count: int = 0
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    is_published: bool = True
    is_pending: bool = False
    source: str = "user"
    source_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RecipeSearchResponse(BaseModel):
    recipes: List[Dict[str, Any]]
    total: int
    page: int
    limit: int
    source: str
    notice: Optional[str] = None


class ImportSpoonacularRequest(BaseModel):
    spoonacular_id: int = Field(..., ge=1)
