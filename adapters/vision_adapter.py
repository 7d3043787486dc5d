"""OpenAI adapter for fridge photo analysis and recipe idea generation."""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from openai import OpenAI

from app.config import settings
from app.exceptions import ExternalServiceError

logger = logging.getLogger("smartplates.vision")

INGREDIENT_PROMPT = (
    "List every visible food ingredient in this image as a JSON array of strings. "
    "Answer with the JSON array only. If no ingredients are visible, answer with an empty array: []."
)

_WORD_RE = re.compile(r"^[^\W\d_][\w ,.\-']*$", re.UNICODE)

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    global _client
    if not settings.openai_api_key:
        raise ExternalServiceError("OpenAI API key is not configured", code="OPENAI_NOT_CONFIGURED")
    if _client is None:
        _client = OpenAI(api_key=settings.openai_api_key)
    return _client


def parse_ingredient_list(raw: str) -> List[str]:
    """Pull ingredient names out of a model answer.

    Accepts a JSON array, a bracketed list embedded in prose, or a plain
    comma/newline separated list.
    """
    raw = (raw or "").strip()
    if raw.startswith("```"):
        raw = raw.strip("`")
        if raw.lower().startswith("json"):
            raw = raw[4:]
        raw = raw.strip()
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return _dedupe([i.strip() for i in parsed if isinstance(i, str) and len(i.strip()) > 1])
    except ValueError:
        pass

    match = re.search(r"\[(.*?)\]", raw, re.S)
    body = match.group(1) if match else raw
    items = [part.replace('"', "").replace("'", "").strip() for part in re.split(r",|\n|\r|\*", body)]
    return _dedupe([i for i in items if len(i) > 1 and _WORD_RE.match(i)])


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        key = item.lower()
        if key not in seen:
            seen.add(key)
            out.append(item)
    return out


def extract_ingredients(image_data: str) -> Dict[str, Any]:
    """Ask a vision model which ingredients are in the image.

    Args:
        image_data: data URL (data:image/...;base64,...) or https URL

    Returns:
        {"ingredients": [...], "raw": <model text>, "model": <model used>}
    """
    client = get_client()
    last_exc: Optional[Exception] = None
    for model in settings.openai_vision_models:
        try:
            response = client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": INGREDIENT_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_data}},
                        ],
                    }
                ],
                max_tokens=1000,
            )
        except Exception as exc:
            last_exc = exc
            logger.warning("vision_model_failed model=%s error=%s", model, exc)
            continue

        raw = response.choices[0].message.content or ""
        ingredients = parse_ingredient_list(raw)
        logger.info("vision_ingredients model=%s count=%d", model, len(ingredients))
        return {"ingredients": ingredients, "raw": raw, "model": model}

    raise ExternalServiceError(f"No vision model responded: {last_exc}")


def generate_recipe_ideas(
    ingredients: List[str],
    dietary_preferences: Optional[List[str]] = None,
    cooking_time: int = 30,
    count: int = 4,
) -> List[Dict[str, Any]]:
    """Ask the text model for recipe ideas built around the given ingredients."""
    client = get_client()
    diet = ", ".join(dietary_preferences or []) or "none"
    prompt = (
        f"Create {count} recipes using mainly these ingredients: {', '.join(ingredients)}. "
        f"Dietary preferences: {diet}. Each recipe must take at most {cooking_time} minutes. "
        'Answer with a JSON object {"recipes": [...]} where each recipe has the keys '
        '"title", "description", "ready_in_minutes", "servings", "difficulty" (easy|medium|hard), '
        '"ingredients" (list of {"name", "amount", "unit"}) and "instructions" (list of strings).'
    )
    try:
        response = client.chat.completions.create(
            model=settings.openai_text_model,
            messages=[
                {"role": "system", "content": "You are a helpful chef who answers with valid JSON only."},
                {"role": "user", "content": prompt},
            ],
            max_tokens=2500,
            response_format={"type": "json_object"},
        )
    except Exception as exc:
        logger.warning("recipe_generation_failed error=%s", exc)
        raise ExternalServiceError(f"Recipe generation failed: {exc}") from exc

    raw = response.choices[0].message.content or "{}"
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ExternalServiceError("Recipe generation returned invalid JSON") from exc

    recipes = data.get("recipes") if isinstance(data, dict) else data
    if not isinstance(recipes, list):
        return []
    return [r for r in recipes if isinstance(r, dict) and r.get("title")][:count]
