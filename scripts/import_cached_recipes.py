#!/usr/bin/env python3
"""
Import raw Spoonacular recipes from a JSON file into the recipe cache.

Usage:
    python scripts/import_cached_recipes.py recipes.json
    python scripts/import_cached_recipes.py recipes.json --mongo-uri mongodb://db:27017
"""

import sys
import json
import logging
import argparse
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from adapters import mongo_adapter, spoonacular_adapter
from app.config import MONGO_URI, MONGO_DB
from app.exceptions import SmartPlatesError
from core.rate_limiter import spoonacular_rate_limiter
from services.recipe_cache_service import RecipeCacheService

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("smartplates.scripts.import_cache")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load Spoonacular recipe JSON into the recipe cache")
    parser.add_argument("path", help="JSON file: a list of recipes or {\"recipes\": [...]}")
    parser.add_argument("--mongo-uri", default=MONGO_URI, help="MongoDB connection string")
    parser.add_argument("--db", default=MONGO_DB, help="MongoDB database name")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logger.info("Connecting to MongoDB...")
    try:
        mongo_adapter.connect(args.mongo_uri, args.db)
    except Exception as exc:
        logger.error("Could not connect to MongoDB: %s", exc)
        return 1

    try:
        service = RecipeCacheService(
            mongo_adapter.get_db(), spoonacular_adapter.get_client(), spoonacular_rate_limiter
        )
        service.ensure_indexes()
        summary = service.import_cached_recipes(args.path)
    except SmartPlatesError as exc:
        logger.error("Import failed: %s", exc)
        return 1
    finally:
        mongo_adapter.close()

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
