"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="SmartPlates", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # MongoDB settings
    mongo_uri: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection URI"
    )
    mongo_db_name: str = Field(
        default="smartplates", description="MongoDB database name"
    )
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Spoonacular settings
    spoonacular_api_key: Optional[str] = Field(
        default=None, description="Spoonacular API key"
    )
    spoonacular_base_url: str = Field(
        default="https://api.spoonacular.com", description="Spoonacular API base URL"
    )
    spoonacular_enabled: bool = Field(
        default=True, description="Fall back to Spoonacular when local search is empty"
    )
    spoonacular_timeout_sec: float = Field(
        default=15.0, gt=0, description="Spoonacular request timeout"
    )
    spoonacular_min_interval_sec: float = Field(
        default=0.5, ge=0, description="Minimum delay between Spoonacular calls"
    )

    # Cache TTLs (seconds)
    cache_recipe_ttl: int = Field(default=7 * 24 * 3600, ge=1)
    cache_search_ttl: int = Field(default=24 * 3600, ge=1)
    cache_ingredients_ttl: int = Field(default=2 * 3600, ge=1)
    cache_random_ttl: int = Field(default=6 * 3600, ge=1)
    cache_nutrition_ttl: int = Field(default=30 * 24 * 3600, ge=1)
    cache_memory_ttl: int = Field(
        default=3600, ge=1, description="In-process cache entry lifetime"
    )
    cache_stale_window: int = Field(
        default=3 * 24 * 3600,
        ge=0,
        description="How long an expired entry may still be served when the API is unavailable",
    )

    # Quota
    spoonacular_daily_quota: int = Field(
        default=150, ge=1, description="Spoonacular points per day"
    )
    spoonacular_quota_buffer: int = Field(
        default=10, ge=0, description="Points kept in reserve"
    )

    # Rate limiting (max requests per window in seconds)
    spoonacular_rate_max: int = Field(default=10, ge=1)
    spoonacular_rate_window: int = Field(default=60, ge=1)
    api_rate_max: int = Field(default=100, ge=1)
    api_rate_window: int = Field(default=60, ge=1)
    upload_rate_max: int = Field(default=5, ge=1)
    upload_rate_window: int = Field(default=60, ge=1)
    search_rate_max: int = Field(default=150, ge=1)
    search_rate_window: int = Field(default=24 * 3600, ge=1)

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_vision_models: list[str] = Field(
        default=["gpt-4o", "gpt-4o-mini"],
        description="Vision models tried in order for fridge analysis",
    )
    openai_text_model: str = Field(
        default="gpt-4o-mini", description="Model used for recipe generation"
    )

    # Admin
    admin_emails: list[str] = Field(
        default=[], description="Emails that receive the admin role on registration"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="SmartPlates API", description="API documentation title"
    )
    api_description: str = Field(
        default="Recipes, meal planning and grocery lists with a cached Spoonacular integration",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("admin_emails", mode="after")
    @classmethod
    def normalize_admin_emails(cls, v):
        return [e.strip().lower() for e in v if e and e.strip()]

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING

    def spoonacular_configured(self) -> bool:
        return bool(self.spoonacular_api_key)


# Global settings instance
settings = Settings()

# Legacy support - export individual values for backward compatibility
MONGO_URI = settings.mongo_uri
MONGO_DB = settings.mongo_db_name
