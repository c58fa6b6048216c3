"""Unit tests for app.py and the HTTP routes.

Tests verify:
- Generate answers with a JSON array, edit with a single object
- A missing API key yields the configuration error before any model call
- Malformed bodies and an exhausted model ladder collapse to the generic failure
- Exactly one error response per failed request
- Health endpoint reports the model ladder
"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app import create_app
from src.api.routes import (
    CONFIG_ERROR_MESSAGE,
    EDIT_FAILURE_MESSAGE,
    GENERATE_FAILURE_MESSAGE,
    REQUEST_ID_HEADER,
)
from src.llm.gemini import CandidateHTTPError
from src.pipeline.recipe_pipeline import RecipePipeline

MODELS = ("gemini-pro-latest", "gemini-2.5-flash", "gemini-flash-latest", "gemini-pro")

NOODLES = {
    "id": "1",
    "title": "Chili Crisp Noodles",
    "tagline": "Fast and fiery",
    "prepTime": 15,
    "calories": 520,
    "tags": ["Spicy"],
    "ingredients": [{"item": "Wheat noodles", "amount": "200g"}],
    "steps": [{"action": "Boil", "description": "Cook the noodles."}],
}


def _client(call_model, api_key="test-key") -> TestClient:
    pipeline = RecipePipeline(api_key=api_key, candidates=MODELS, call_model=call_model)
    return TestClient(create_app(pipeline))


class TestGenerateRoute:
    def test_success_returns_array(self):
        call_model = AsyncMock(return_value=f"Here you go:\n```json\n{json.dumps([NOODLES])}\n```")
        client = _client(call_model)

        response = client.post("/api/generate", json={"craving": "Spicy noodles", "type": "FOOD"})

        assert response.status_code == 200
        body = response.json()
        assert isinstance(body, list)
        assert body[0]["title"] == "Chili Crisp Noodles"
        assert body[0]["prepTime"] == 15

    def test_fenced_answer_from_first_candidate_is_returned(self):
        call_model = AsyncMock(
            side_effect=['Here you go:\n```json\n[{"id":"1"}]\n```\nEnjoy!']
            + [CandidateHTTPError(m, 503) for m in MODELS[1:]]
        )
        client = _client(call_model)

        response = client.post("/api/generate", json={"craving": "Anything"})

        assert response.status_code == 200
        assert response.json() == [{"id": "1"}]
        assert call_model.await_count == 1

    def test_extra_recipe_keys_are_returned(self):
        answer = [{"id": "1", "title": "Soup", "difficulty": "easy"}]
        client = _client(AsyncMock(return_value=json.dumps(answer)))

        response = client.post("/api/generate", json={"craving": "Soup"})

        assert response.json() == answer

    def test_craving_reaches_prompt_verbatim(self):
        call_model = AsyncMock(return_value="[]")
        client = _client(call_model)

        client.post("/api/generate", json={"craving": "  spicy   ramen  "})

        assert '"  spicy   ramen  "' in call_model.await_args.args[1]

    def test_missing_api_key_is_configuration_error(self):
        call_model = AsyncMock()
        client = _client(call_model, api_key="")

        response = client.post("/api/generate", json={"craving": "Spicy noodles"})

        assert response.status_code == 500
        assert response.json() == {"error": CONFIG_ERROR_MESSAGE}
        call_model.assert_not_awaited()

    def test_missing_api_key_wins_over_malformed_body(self):
        client = _client(AsyncMock(), api_key="")

        response = client.post("/api/generate", content=b"not json")

        assert response.json() == {"error": CONFIG_ERROR_MESSAGE}

    @pytest.mark.parametrize("body", [b"not json", b"[]", b'{"type": "FOOD"}', b""])
    def test_malformed_body_is_generic_failure(self, body):
        call_model = AsyncMock()
        client = _client(call_model)

        response = client.post("/api/generate", content=body, headers={"Content-Type": "application/json"})

        assert response.status_code == 500
        assert response.json() == {"error": GENERATE_FAILURE_MESSAGE}
        call_model.assert_not_awaited()

    def test_all_candidates_failing_yields_one_error(self):
        call_model = AsyncMock(side_effect=[CandidateHTTPError(m, 503) for m in MODELS])
        client = _client(call_model)

        response = client.post("/api/generate", json={"craving": "Spicy noodles"})

        assert response.status_code == 500
        assert response.json() == {"error": GENERATE_FAILURE_MESSAGE}
        assert call_model.await_count == len(MODELS)

    def test_unexpected_error_is_generic_failure(self):
        call_model = AsyncMock(side_effect=KeyError("boom"))
        client = _client(call_model)

        response = client.post("/api/generate", json={"craving": "Spicy noodles"})

        assert response.json() == {"error": GENERATE_FAILURE_MESSAGE}


class TestEditRoute:
    def test_success_returns_object_with_new_version(self):
        edited = {**NOODLES, "title": "Mild Noodles", "tags": ["Mild"]}
        client = _client(AsyncMock(return_value=json.dumps(edited)))

        response = client.post("/api/edit", json={"recipe": NOODLES, "request": "less spicy"})

        assert response.status_code == 200
        body = response.json()
        assert isinstance(body, dict)
        assert body["id"] == "1-v2"
        assert body["title"] == "Mild Noodles"

    def test_loose_recipe_is_accepted(self):
        recipe = {"id": "101", "title": "Curry", "prepTime": "20 mins", "servings": 4}
        edited = {**NOODLES, "id": "101", "servings": 4}
        call_model = AsyncMock(return_value=json.dumps(edited))
        client = _client(call_model)

        response = client.post("/api/edit", json={"recipe": recipe, "request": "make it vegetarian"})

        assert response.status_code == 200
        assert response.json() == {**edited, "id": "101-v2"}
        assert json.dumps(recipe, separators=(",", ":")) in call_model.await_args.args[1]

    def test_missing_api_key_is_configuration_error(self):
        client = _client(AsyncMock(), api_key="")

        response = client.post("/api/edit", json={"recipe": NOODLES, "request": "less spicy"})

        assert response.status_code == 500
        assert response.json() == {"error": CONFIG_ERROR_MESSAGE}

    def test_malformed_body_is_generic_failure(self):
        client = _client(AsyncMock())

        response = client.post("/api/edit", json={"request": "less spicy"})

        assert response.status_code == 500
        assert response.json() == {"error": EDIT_FAILURE_MESSAGE}

    def test_all_candidates_failing_yields_one_error(self):
        client = _client(AsyncMock(return_value="Sorry, I can't."))

        response = client.post("/api/edit", json={"recipe": NOODLES, "request": "less spicy"})

        assert response.status_code == 500
        assert response.json() == {"error": EDIT_FAILURE_MESSAGE}


class TestRequestId:
    def test_success_carries_request_id(self):
        client = _client(AsyncMock(return_value="[]"))

        response = client.post("/api/generate", json={"craving": "Soup"})

        assert len(response.headers[REQUEST_ID_HEADER]) == 12

    def test_failures_carry_request_id(self):
        client = _client(AsyncMock(), api_key="")

        response = client.post("/api/edit", json={"recipe": NOODLES, "request": "x"})

        assert response.headers[REQUEST_ID_HEADER]

    def test_ids_differ_between_requests(self):
        client = _client(AsyncMock(return_value="[]"))

        first = client.post("/api/generate", json={"craving": "Soup"}).headers[REQUEST_ID_HEADER]
        second = client.post("/api/generate", json={"craving": "Soup"}).headers[REQUEST_ID_HEADER]

        assert first != second

    def test_route_logs_are_tagged(self, caplog):
        client = _client(AsyncMock(), api_key="")

        with caplog.at_level("INFO", logger="sous_chef"):
            response = client.post("/api/generate", json={"craving": "Soup"})

        tagged = [r for r in caplog.records if getattr(r, "request_id", None) == response.headers[REQUEST_ID_HEADER]]
        assert len(tagged) == 2


class TestHealthRoute:
    def test_reports_ladder(self):
        client = _client(AsyncMock())

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "models": list(MODELS)}

    def test_health_does_not_require_api_key(self):
        client = _client(AsyncMock(), api_key="")

        assert client.get("/health").status_code == 200


class TestCreateApp:
    def test_pipeline_is_attached_to_state(self):
        pipeline = RecipePipeline(api_key="k", candidates=MODELS, call_model=AsyncMock())
        application = create_app(pipeline)

        assert application.state.pipeline is pipeline

    def test_routes_registered(self):
        application = create_app(RecipePipeline(api_key="k", candidates=MODELS, call_model=AsyncMock()))
        paths = {route.path for route in application.routes}

        assert {"/api/generate", "/api/edit", "/health"} <= paths
