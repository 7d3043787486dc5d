"""
SmartPlates FastAPI Application
Main entry point: lifespan (MongoDB, indexes, dedupe), middleware, error handlers and routers
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import (
    admin,
    ai,
    auth,
    cache,
    categories,
    contact,
    grocery,
    health,
    meal_plans,
    recipes,
    users,
)
from adapters import mongo_adapter, spoonacular_adapter
from app.config import settings, MONGO_URI, MONGO_DB
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    smartplates_exception_handler,
    general_exception_handler,
)
from app.exceptions import SmartPlatesError
from repositories import (
    GroceryListRepository,
    InteractionRepository,
    MealPlanRepository,
    RecipeRepository,
    UserRepository,
)
from services.recipe_cache_service import get_cache_service

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("smartplates.main")


def init_database() -> None:
    """Connect to MongoDB, create indexes and collapse duplicate Spoonacular mirrors."""
    mongo_adapter.connect(MONGO_URI, MONGO_DB)
    db = mongo_adapter.get_db()
    get_cache_service().ensure_indexes()
    UserRepository(db).ensure_indexes()
    MealPlanRepository(db).ensure_indexes()
    GroceryListRepository(db).ensure_indexes()
    InteractionRepository(db).ensure_indexes()
    RecipeRepository(db).ensure_unique_index_and_dedupe()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Connects to MongoDB with retries and closes clients on shutdown.
    """
    last_exc: Optional[Exception] = None

    _logger.info(f"Starting SmartPlates in {settings.environment.value} mode")

    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # blocking pymongo calls run in a worker thread
            await anyio.to_thread.run_sync(init_database)
            _logger.info("Database initialization succeeded")
            break
        except Exception as exc:
            last_exc = exc
            _logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
            else:
                _logger.error(
                    "Database initialization failed after %d attempts", attempt
                )
                raise

    if not spoonacular_adapter.get_client().is_configured():
        _logger.warning("SPOONACULAR_API_KEY not set; external recipe fallback disabled")

    try:
        yield
    finally:
        _logger.info("Shutting down SmartPlates")
        try:
            spoonacular_adapter.close()
        except Exception as e:
            _logger.exception("Error closing Spoonacular session during shutdown: %s", e)

        try:
            mongo_adapter.close()
            _logger.info("MongoDB connection closed")
        except Exception as e:
            _logger.exception("Error closing MongoDB adapter during shutdown: %s", e)


app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=(
        f"{settings.api_prefix}/openapi.json" if not settings.is_production() else None
    ),
    docs_url=f"{settings.api_prefix}/docs" if not settings.is_production() else None,
    redoc_url=f"{settings.api_prefix}/redoc" if not settings.is_production() else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(SmartPlatesError, smartplates_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(recipes.router, prefix=settings.api_prefix)
app.include_router(categories.router, prefix=settings.api_prefix)
app.include_router(ai.router, prefix=settings.api_prefix)
app.include_router(meal_plans.router, prefix=settings.api_prefix)
app.include_router(grocery.router, prefix=settings.api_prefix)
app.include_router(grocery.saved_router, prefix=settings.api_prefix)
app.include_router(contact.router, prefix=settings.api_prefix)
app.include_router(cache.router, prefix=settings.api_prefix)
app.include_router(admin.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
