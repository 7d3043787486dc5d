"""Pydantic schemas for accounts and profiles."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str
    confirm_password: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    dietary_restrictions: Optional[List[str]] = None
    favorite_categories: Optional[List[str]] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class PasswordResetRequest(BaseModel):
    new_password: str


class ActiveToggleRequest(BaseModel):
    is_active: bool


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str = "user"
    avatar: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = True
    is_email_verified: bool = False
    dietary_restrictions: List[str] = []
    favorite_categories: List[str] = []
    saved_recipes: List[str] = []
    created_recipes: List[str] = []
    liked_recipes: List[str] = []
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
