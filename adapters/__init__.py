"""
Adapters package - External service connections.
MongoDB, the Spoonacular HTTP API and OpenAI.
"""

from adapters import mongo_adapter, spoonacular_adapter, vision_adapter

__all__ = [
    "mongo_adapter",
    "spoonacular_adapter",
    "vision_adapter",
]
