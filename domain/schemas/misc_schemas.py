"""Request bodies for reviews, AI features and the contact form."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int
    comment: str


class FridgePreferences(BaseModel):
    dietary: List[str] = []
    allergies: List[str] = []
    cuisine_style: Optional[str] = None


class AnalyzeFridgeRequest(BaseModel):
    image_data: str = Field(..., min_length=1, description="data: URL or https URL of the photo")
    preferences: Optional[FridgePreferences] = None


class GenerateRecipesRequest(BaseModel):
    ingredients: List[str] = []
    dietary_preferences: List[str] = []
    cooking_time: int = Field(default=30, ge=5, le=480)
    count: int = Field(default=4, ge=1, le=10)


class ContactRequest(BaseModel):
    name: str
    email: str
    subject: str = ""
    message: str
    reason: Optional[str] = None


class ImportCachedRecipesRequest(BaseModel):
    path: str = Field(..., min_length=1)
