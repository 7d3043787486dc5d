"""Tests for text, ingredient, date and cache key helpers."""

from datetime import date, datetime

import pytest

from core.utils.helpers import (
    categorize_ingredient,
    ingredients_cache_key,
    is_staple,
    normalize_ingredient,
    normalize_unit,
    random_cache_key,
    search_cache_key,
    strip_html,
    truncate,
    week_start,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2 Large Eggs, beaten", "egg"),
        ("Fresh Tomatoes", "tomato"),
        ("salt & freshly ground pepper", "salt and pepper"),
        ("Cherries", "cherry"),
    ],
)
def test_normalize_ingredient(raw, expected):
    assert normalize_ingredient(raw) == expected


@pytest.mark.parametrize(
    "unit,expected",
    [("Tablespoons", "tbsp"), ("tsps", "tsp"), ("grams", "g"), ("oz.", "oz"), ("", ""), (None, "")],
)
def test_normalize_unit(unit, expected):
    assert normalize_unit(unit) == expected


@pytest.mark.parametrize(
    "name,category",
    [
        ("Chicken Breast", "Meat & Seafood"),
        ("fresh basil", "Herbs & Spices"),
        ("2 carrots", "Produce"),
        ("cheddar", "Dairy & Eggs"),
        ("quinoa", "Pantry"),
        ("dragonfruit", "Other"),
    ],
)
def test_categorize_ingredient(name, category):
    assert categorize_ingredient(name) == category


def test_is_staple():
    assert is_staple("Salt")
    assert is_staple("olive oil")
    assert not is_staple("saffron")


def test_strip_html_and_truncate():
    assert strip_html("<p>Fish &amp; <b>chips</b></p>") == "Fish & chips"
    assert strip_html(None) == ""
    assert truncate("abcdefghij", 20) == "abcdefghij"
    assert truncate("abcdefghij", 6) == "abc..."


def test_week_start_is_monday():
    assert week_start(date(2025, 3, 13)) == date(2025, 3, 10)
    assert week_start(date(2025, 3, 10)) == date(2025, 3, 10)
    assert week_start(datetime(2025, 3, 16, 23, 59)) == date(2025, 3, 10)


def test_search_cache_key_is_normalized():
    a = search_cache_key(" Pasta ", {"diet": "Vegan", "number": 12, "type": None})
    b = search_cache_key("pasta", {"number": 12, "diet": "vegan", "cuisine": ""})
    assert a == b == "search:pasta:diet=vegan&number=12"


def test_ingredient_and_random_keys_ignore_order_and_case():
    assert ingredients_cache_key(["Egg", "cheese", " egg"]) == "ingredients:cheese,egg"
    assert random_cache_key(["Vegan", "dinner"], 10) == random_cache_key(["dinner", "vegan"], 10)
