"""
Domain layer - Business entities, schemas, mappers and enums.
"""

from domain import enums, schemas

__all__ = ["enums", "schemas"]
