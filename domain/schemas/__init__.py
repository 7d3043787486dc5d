"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.recipe_schemas import (
    RecipeIngredient,
    InstructionStep,
    InstructionBlock,
    RecipeCreate,
    RecipeUpdate,
    RecipeResponse,
    RecipeSearchResponse,
    ImportSpoonacularRequest,
)
from domain.schemas.user_schemas import (
    RegisterRequest,
    LoginRequest,
    UserUpdate,
    PasswordChangeRequest,
    PasswordResetRequest,
    ActiveToggleRequest,
    UserResponse,
)
from domain.schemas.plan_schemas import (
    MealSlot,
    DayPlan,
    MealPlanCreate,
    MealPlanUpdate,
    AddMealRequest,
)
from domain.schemas.grocery_schemas import (
    GroceryItem,
    GroceryItemsRequest,
    GenerateGroceryListRequest,
    SavedGroceryListCreate,
    ItemCheckRequest,
)
from domain.schemas.misc_schemas import (
    ReviewCreate,
    FridgePreferences,
    AnalyzeFridgeRequest,
    GenerateRecipesRequest,
    ContactRequest,
    ImportCachedRecipesRequest,
)

__all__ = [
    "RecipeIngredient",
    "InstructionStep",
    "InstructionBlock",
    "RecipeCreate",
    "RecipeUpdate",
    "RecipeResponse",
    "RecipeSearchResponse",
    "ImportSpoonacularRequest",
    "RegisterRequest",
    "LoginRequest",
    "UserUpdate",
    "PasswordChangeRequest",
    "PasswordResetRequest",
    "ActiveToggleRequest",
    "UserResponse",
    "MealSlot",
    "DayPlan",
    "MealPlanCreate",
    "MealPlanUpdate",
    "AddMealRequest",
    "GroceryItem",
    "GroceryItemsRequest",
    "GenerateGroceryListRequest",
    "SavedGroceryListCreate",
    "ItemCheckRequest",
    "ReviewCreate",
    "FridgePreferences",
    "AnalyzeFridgeRequest",
    "GenerateRecipesRequest",
    "ContactRequest",
    "ImportCachedRecipesRequest",
]
