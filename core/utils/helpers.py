"""
SmartPlates utility functions
"""

from __future__ import annotations
import html
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional


# Text & ingredient utilities

STOPWORDS = {"fresh", "chopped", "diced", "minced", "ground", "large", "small",
             "cup", "cups", "tbsp", "tablespoon", "tablespoons", "tsp", "teaspoon",
             "teaspoons", "ounce", "ounces", "oz", "gram", "grams", "ml", "ltr",
             "package", "packages", "can", "cans"}

UNIT_ALIASES = {
    "tbs": "tbsp", "tbl": "tbsp", "tbls": "tbsp", "tablespoon": "tbsp", "tablespoons": "tbsp",
    "teaspoon": "tsp", "teaspoons": "tsp", "tsps": "tsp", "ts": "tsp",
    "cups": "cup", "grams": "g", "gram": "g", "g.": "g", "kilograms": "kg",
    "ounces": "oz", "ounce": "oz", "oz.": "oz", "pounds": "lb", "pound": "lb", "lbs": "lb",
    "milliliters": "ml", "millilitres": "ml", "liters": "l", "litres": "l",
    "servings": "serving", "pieces": "piece", "cloves": "clove",
}

DESCRIPTORS = {
    "beaten", "chopped", "diced", "minced", "sliced", "crushed", "ground",
    "fresh", "large", "small", "medium", "optional", "boiled", "mashed",
    "drained", "washed", "prepared", "cooked", "baked", "fried",
}

NOISE = {"optional", "to", "taste", "and", "in", "no", "&", "of"}

# Salt and pepper style staples most kitchens already have
STAPLES = {"salt", "pepper", "black pepper", "salt and pepper", "water", "oil",
           "olive oil", "vegetable oil", "sugar", "flour"}

GROCERY_CATEGORIES = {
    "Produce": {"tomato", "potato", "carrot", "onion", "garlic", "spinach", "lettuce",
                "cucumber", "bell pepper", "broccoli", "cauliflower", "zucchini", "pumpkin",
                "radish", "apple", "banana", "orange", "lemon", "lime", "grape", "pear",
                "peach", "berry", "strawberry", "blueberry", "mango", "avocado", "mushroom",
                "celery", "cabbage", "kale", "ginger", "scallion", "shallot"},
    "Herbs & Spices": {"basil", "parsley", "thyme", "rosemary", "oregano", "dill", "chive",
                       "mint", "coriander", "cilantro", "sage", "cumin", "paprika",
                       "cinnamon", "turmeric", "chili", "nutmeg", "pepper", "salt"},
    "Meat & Seafood": {"chicken", "beef", "pork", "lamb", "turkey", "duck", "bacon", "sausage",
                       "ham", "salmon", "tuna", "shrimp", "crab", "lobster", "fish", "cod"},
    "Dairy & Eggs": {"milk", "cheese", "butter", "yogurt", "cream", "egg", "parmesan",
                     "mozzarella", "cheddar"},
    "Bakery": {"bread", "bun", "tortilla", "bagel", "pita", "baguette"},
    "Pantry": {"rice", "pasta", "flour", "sugar", "oil", "vinegar", "soy sauce", "honey",
               "bean", "lentil", "chickpea", "oat", "quinoa", "broth", "stock", "noodle",
               "mustard", "ketchup", "mayonnaise", "jam", "nut", "almond", "walnut", "peanut"},
}
DEFAULT_CATEGORY = "Other"


def normalize_text(s: str) -> str:
    """Basic normalization: lowercase, collapse spaces, strip punctuation edges."""
    s = s.lower().strip()
    s = re.sub(r"[()\[\],.;:]+", " ", s)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def normalize_unit(token: Optional[str]) -> str:
    """Map common unit variants to a canonical form."""
    t = (token or "").lower().strip().strip(".")
    return UNIT_ALIASES.get(t, t)


def singularize(word: str) -> str:
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("oes"):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 3:
        return word[:-1]
    return word


def normalize_ingredient(ingredient: str) -> str:
    """Reduce an ingredient name to a comparable key ("2 Large Eggs, beaten" -> "egg")."""
    s = normalize_text(ingredient or "")
    s = re.sub(r"\b\d+([./-]\d+)?\b", " ", s)
    s = re.sub(r"\b(c|lb|pkg|can|oz|g|kg|ml|l|cups?|tbsp|tsp)\b", " ", s)

    tokens = [t for t in s.split() if t not in STOPWORDS and t not in DESCRIPTORS]
    tokens = [t for t in tokens if t not in NOISE and len(t) > 1]
    s = " ".join(tokens)

    if "salt" in s and "pepper" in s:
        return "salt and pepper"

    return " ".join(singularize(t) for t in s.split()).strip()


def categorize_ingredient(name: str) -> str:
    """Grocery aisle for an ingredient name, matched on whole words."""
    normalized = normalize_ingredient(name)
    words = set(normalized.split())
    for category, keywords in GROCERY_CATEGORIES.items():
        for keyword in keywords:
            if " " in keyword:
                if keyword in normalized:
                    return category
            elif keyword in words:
                return category
    return DEFAULT_CATEGORY


def is_staple(name: str) -> bool:
    return normalize_ingredient(name) in STAPLES


# HTML

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", html.unescape(_TAG_RE.sub("", text))).strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


# Dates

def week_start(day: date | datetime) -> date:
    """Monday of the week containing ``day``."""
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=day.weekday())


# Cache keys

def _norm_term(value: Any) -> str:
    return str(value).strip().lower()


def search_cache_key(query: Optional[str], filters: Optional[Dict[str, Any]] = None) -> str:
    """``search:{query}:{k=v&...}`` with filters sorted by key and empty values dropped."""
    parts = []
    for key in sorted((filters or {}).keys()):
        value = filters[key]
        if value is None or value == "" or value == []:
            continue
        if isinstance(value, (list, tuple, set)):
            value = ",".join(sorted(_norm_term(v) for v in value))
        parts.append(f"{key}={_norm_term(value)}")
    return f"search:{_norm_term(query or '')}:{'&'.join(parts)}"


def ingredients_cache_key(ingredients: Iterable[str]) -> str:
    names = sorted({_norm_term(i) for i in ingredients if i and str(i).strip()})
    return f"ingredients:{','.join(names)}"


def random_cache_key(tags: Optional[Iterable[str]], number: int) -> str:
    names = sorted({_norm_term(t) for t in (tags or []) if t and str(t).strip()})
    return f"random:{','.join(names)}:{int(number)}"


def recipe_cache_key(recipe_id: Any) -> str:
    return f"recipe:{recipe_id}"


def nutrition_cache_key(recipe_id: Any) -> str:
    return f"nutrition:{recipe_id}"
