"""Spoonacular payload to recipe document mapping."""

import pytest
from bson import ObjectId

from domain.mappers.recipe_mapper import RecipeMapper
from domain.schemas.recipe_schemas import DEFAULT_RECIPE_IMAGE
from test_fixtures import spoonacular_recipe


@pytest.mark.parametrize(
    "value,expected",
    [("spoonacular-715", 715), ("715", 715), (715, 715), (" 42 ", 42), ("abc", None), ("spoonacular-", None), (None, None)],
)
def test_parse_external_id(value, expected):
    assert RecipeMapper.parse_external_id(value) == expected


def test_from_spoonacular_maps_fields():
    doc = RecipeMapper.from_spoonacular(spoonacular_recipe(101, "Tomato Basil Pasta"))

    assert doc["spoonacular_id"] == 101
    assert doc["source"] == "spoonacular"
    assert doc["description"] == "Tomato Basil Pasta is a quick weeknight dinner."
    assert doc["ready_in_minutes"] == 25
    assert doc["likes_count"] == 40
    assert [i["name"] for i in doc["extended_ingredients"]] == ["spaghetti", "tomato", "basil"]
    assert doc["extended_ingredients"][0]["amount"] == 200.0
    assert doc["analyzed_instructions"][0]["steps"][1] == {"number": 2, "step": "Toss with sauce."}
    assert doc["nutrition"] is None
    assert doc["author_name"] == "Spoonacular"


def test_from_spoonacular_falls_back_to_plain_instructions():
    raw = spoonacular_recipe(
        7,
        "Toast",
        image=None,
        analyzedInstructions=[],
        instructions="<p>Toast the bread.</p> <p>Butter it!</p>",
        nutrition={"nutrients": [{"name": "Calories", "amount": 120, "unit": "kcal"}, {"amount": 3}]},
    )

    doc = RecipeMapper.from_spoonacular(raw)

    assert doc["image"] == DEFAULT_RECIPE_IMAGE
    assert doc["analyzed_instructions"] == [
        {"name": "", "steps": [{"number": 1, "step": "Toast the bread."}, {"number": 2, "step": "Butter it!"}]}
    ]
    assert doc["nutrition"] == {"nutrients": [{"name": "Calories", "amount": 120.0, "unit": "kcal"}]}


def test_from_search_result_uses_external_id():
    item = RecipeMapper.from_search_result(
        {"id": 201, "title": "Cheesy Omelette", "missedIngredients": [{"name": "chives"}], "likes": 12}
    )

    assert item["id"] == "spoonacular-201"
    assert item["missed_ingredients"] == ["chives"]
    assert item["likes_count"] == 12


def test_to_public_stringifies_ids():
    oid, other = ObjectId(), ObjectId()
    public = RecipeMapper.to_public({"_id": oid, "title": "x", "refs": [other], "nested": {"id": other}})

    assert public["id"] == str(oid)
    assert "_id" not in public
    assert public["refs"] == [str(other)]
    assert public["nested"] == {"id": str(other)}
    assert RecipeMapper.to_public(None) is None
