"""Request normalization for the generate and edit endpoints.

Turns a raw HTTP body into a validated request model:
1. Decode and parse the JSON body
2. Check it is a JSON object
3. Validate and lightly shape it through the Pydantic request schema

Any failure raises RequestShapeError. The API layer deliberately reports it
with the same generic failure as every other pipeline error.
"""

import json
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.models.models import EditRequest, GenerationRequest
from src.utils.logger import logger

RequestModel = TypeVar("RequestModel", bound=BaseModel)


class RequestShapeError(ValueError):
    """The caller sent a body that cannot be turned into a request."""


def _load_json_object(body: bytes | str) -> dict:
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RequestShapeError(f"Request body is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise RequestShapeError(f"Request body must be a JSON object, got {type(payload).__name__}")
    return payload


def _validate(model: Type[RequestModel], body: bytes | str) -> RequestModel:
    payload = _load_json_object(body)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"{model.__name__} validation failed: {e}")
        raise RequestShapeError(f"Invalid {model.__name__}: {e.error_count()} error(s)") from e


def parse_generation_request(body: bytes | str) -> GenerationRequest:
    """Parse a /api/generate body.

    Args:
        body: Raw request body.

    Returns:
        GenerationRequest with type defaulted to FOOD and ingredients deduplicated.

    Raises:
        RequestShapeError: If the body is not JSON, not an object, or fails validation.
    """
    return _validate(GenerationRequest, body)


def parse_edit_request(body: bytes | str) -> EditRequest:
    """Parse a /api/edit body.

    Raises:
        RequestShapeError: If the body is not JSON, not an object, or fails validation.
    """
    return _validate(EditRequest, body)
