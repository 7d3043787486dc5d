"""
Recipe domain mappers.
Transforms raw Spoonacular payloads into local recipe documents and
recipe documents into their public API shape.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from adapters import mongo_adapter
from core.utils.helpers import strip_html, truncate
from domain.enums import RecipeSource
from domain.schemas.recipe_schemas import DEFAULT_RECIPE_IMAGE

EXTERNAL_PREFIX = "spoonacular-"
_EXTERNAL_RE = re.compile(r"^(?:spoonacular-)?(\d+)$")


class RecipeMapper:
    """Mapper for recipe-related transformations."""

    @staticmethod
    def external_id(spoonacular_id: Any) -> str:
        return f"{EXTERNAL_PREFIX}{int(spoonacular_id)}"

    @staticmethod
    def parse_external_id(value: Any) -> Optional[int]:
        """``spoonacular-123`` or ``123`` -> 123; anything else -> None."""
        if value is None:
            return None
        match = _EXTERNAL_RE.match(str(value).strip())
        return int(match.group(1)) if match else None

    @staticmethod
    def from_spoonacular(raw: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert a Spoonacular recipe (information or complexSearch result)
        into a local recipe document.

        Args:
            raw: recipe payload as returned by Spoonacular

        Returns:
            Recipe document without _id, ready for upsert by spoonacular_id
        """
        summary = raw.get("summary") or ""
        now = datetime.utcnow()
        return {
            "spoonacular_id": int(raw["id"]),
            "title": raw.get("title") or "Untitled recipe",
            "description": truncate(strip_html(summary), 300),
            "summary": summary,
            "image": raw.get("image") or DEFAULT_RECIPE_IMAGE,
            "ready_in_minutes": int(raw.get("readyInMinutes") or 0),
            "servings": int(raw.get("servings") or 1),
            "extended_ingredients": RecipeMapper._ingredients(raw),
            "analyzed_instructions": RecipeMapper._instructions(raw),
            "cuisines": list(raw.get("cuisines") or []),
            "dish_types": list(raw.get("dishTypes") or []),
            "diets": list(raw.get("diets") or []),
            "nutrition": RecipeMapper._nutrition(raw.get("nutrition")),
            "source_url": raw.get("sourceUrl"),
            "rating": 0,
            "ratings_count": 0,
            "likes_count": int(raw.get("aggregateLikes") or 0),
            "author_id": None,
            "author_name": "Spoonacular",
            "is_published": True,
            "is_pending": False,
            "source": RecipeSource.SPOONACULAR.value,
            "created_at": now,
            "updated_at": now,
        }

    @staticmethod
    def from_search_result(raw: Dict[str, Any]) -> Dict[str, Any]:
        """Public list item for a Spoonacular result that has not been mirrored."""
        return {
            "id": RecipeMapper.external_id(raw["id"]),
            "spoonacular_id": int(raw["id"]),
            "title": raw.get("title") or "Untitled recipe",
            "image": raw.get("image") or DEFAULT_RECIPE_IMAGE,
            "description": truncate(strip_html(raw.get("summary")), 300),
            "ready_in_minutes": int(raw.get("readyInMinutes") or 0),
            "servings": int(raw.get("servings") or 1),
            "used_ingredient_count": raw.get("usedIngredientCount"),
            "missed_ingredient_count": raw.get("missedIngredientCount"),
            "missed_ingredients": [
                i.get("name") for i in raw.get("missedIngredients") or [] if i.get("name")
            ],
            "likes_count": int(raw.get("aggregateLikes") or raw.get("likes") or 0),
            "source": RecipeSource.SPOONACULAR.value,
        }

    @staticmethod
    def to_public(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Convert a MongoDB document to public API format (ObjectIds become strings)."""
        return mongo_adapter.to_public(doc)

    @staticmethod
    def _ingredients(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = []
        for ing in raw.get("extendedIngredients") or []:
            name = ing.get("name") or ing.get("originalName") or ing.get("original")
            if not name:
                continue
            items.append(
                {
                    "id": ing.get("id"),
                    "name": name,
                    "amount": float(ing.get("amount") or 0),
                    "unit": ing.get("unit") or "",
                    "notes": ing.get("original") or "",
                }
            )
        return items

    @staticmethod
    def _instructions(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
        blocks = []
        for block in raw.get("analyzedInstructions") or []:
            steps = [
                {"number": int(s.get("number") or i + 1), "step": s.get("step", "").strip()}
                for i, s in enumerate(block.get("steps") or [])
                if s.get("step")
            ]
            if steps:
                blocks.append({"name": block.get("name") or "", "steps": steps})
        if not blocks and raw.get("instructions"):
            text = strip_html(raw["instructions"])
            sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", text) if s.strip()]
            blocks.append(
                {"name": "", "steps": [{"number": i + 1, "step": s} for i, s in enumerate(sentences)]}
            )
        return blocks

    @staticmethod
    def _nutrition(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not raw:
            return None
        nutrients = [
            {"name": n.get("name"), "amount": float(n.get("amount") or 0), "unit": n.get("unit") or ""}
            for n in raw.get("nutrients") or []
            if n.get("name")
        ]
        return {"nutrients": nutrients}

