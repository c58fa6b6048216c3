"""Unit tests for request body normalization."""

import json

import pytest

from src.hooks.normalize_input import RequestShapeError, parse_edit_request, parse_generation_request
from src.models.models import RecipeType


class TestParseGenerationRequest:
    def test_minimal_body(self):
        request = parse_generation_request(b'{"craving": "Spicy noodles"}')

        assert request.craving == "Spicy noodles"
        assert request.type == RecipeType.FOOD

    def test_full_drink_body(self):
        body = json.dumps(
            {"craving": "Something bitter", "type": "drink", "ingredients": ["campari", "gin"], "mood": "moody"}
        )
        request = parse_generation_request(body)

        assert request.type == RecipeType.DRINK
        assert request.ingredients == ["campari", "gin"]
        assert request.mood == "moody"

    def test_accepts_str_body(self):
        assert parse_generation_request('{"craving": "Soup"}').craving == "Soup"

    @pytest.mark.parametrize("body", [b"", b"not json", b'{"craving": ', b"\xff\xfe"])
    def test_unparseable_body(self, body):
        with pytest.raises(RequestShapeError, match="not valid JSON"):
            parse_generation_request(body)

    @pytest.mark.parametrize("body", [b"[]", b'"craving"', b"42", b"null"])
    def test_non_object_body(self, body):
        with pytest.raises(RequestShapeError, match="JSON object"):
            parse_generation_request(body)

    def test_missing_craving(self):
        with pytest.raises(RequestShapeError, match="GenerationRequest"):
            parse_generation_request(b'{"type": "FOOD"}')

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_generation_request(b"{}")


class TestParseEditRequest:
    def test_valid_body(self):
        body = json.dumps({"recipe": {"id": "101", "title": "Curry"}, "request": "make it vegetarian"})
        request = parse_edit_request(body.encode())

        assert request.recipe_id == "101"
        assert request.request == "make it vegetarian"

    def test_missing_recipe(self):
        with pytest.raises(RequestShapeError, match="EditRequest"):
            parse_edit_request(b'{"request": "less salt"}')

    def test_unparseable_body(self):
        with pytest.raises(RequestShapeError):
            parse_edit_request(b"{recipe: 1}")
