"""
Standardized API response models and utilities.
Provides consistent response formatting across all endpoints.
"""

from typing import Optional, Any, Dict
from pydantic import BaseModel, Field
from datetime import datetime


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: Optional[str] = Field(None, description="Service version")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Check timestamp"
    )


class StatusResponse(HealthResponse):
    """Dependency status: database, Spoonacular and today's quota"""

    mongodb: bool = Field(..., description="MongoDB answered a ping")
    spoonacular_configured: bool = Field(..., description="Spoonacular API key present")
    quota: Optional[Dict[str, Any]] = Field(None, description="Today's Spoonacular quota")


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": datetime.utcnow(),
    }
