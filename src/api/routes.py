"""HTTP routes for Sous Chef.

POST /api/generate  -> JSON array of recipes
POST /api/edit      -> single edited recipe
GET  /health        -> liveness and configured model ladder

Failure mapping (every failure is a 500 with {"error": ...}):
- missing API key      -> "Server configuration error: Missing API Key." (checked first)
- anything else        -> the endpoint's generic message; a malformed body,
                          an exhausted model ladder and an unexpected error
                          are deliberately indistinguishable for the caller.
"""

import uuid
from typing import Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.hooks.normalize_input import parse_edit_request, parse_generation_request
from src.models.models import ErrorResponse
from src.pipeline.recipe_pipeline import RecipePipeline
from src.utils.logger import logger

CONFIG_ERROR_MESSAGE = "Server configuration error: Missing API Key."
GENERATE_FAILURE_MESSAGE = "Failed to generate."
EDIT_FAILURE_MESSAGE = "Failed to edit recipe."
FAILURE_STATUS_CODE = 500
REQUEST_ID_HEADER = "X-Request-ID"

router = APIRouter()


def error_response(message: str, status_code: int = FAILURE_STATUS_CODE) -> JSONResponse:
    """Build the {"error": message} failure body."""
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def get_pipeline(request: Request) -> RecipePipeline:
    return request.app.state.pipeline


async def _run(
    request: Request,
    failure_message: str,
    handler: Callable[[RecipePipeline, bytes], Awaitable[object]],
) -> JSONResponse:
    """Shared emitter: configuration check, then handler, then failure collapse.

    Every response carries the X-Request-ID that tags the route log lines.
    """
    request_id = new_request_id()
    log_context = {"request_id": request_id}
    logger.info(f"{request.method} {request.url.path}", extra=log_context)

    pipeline = get_pipeline(request)
    if not pipeline.is_configured:
        logger.error("GEMINI_API_KEY is not configured, refusing request", extra=log_context)
        response = error_response(CONFIG_ERROR_MESSAGE)
    else:
        try:
            body = await request.body()
            response = JSONResponse(await handler(pipeline, body))
        except Exception as e:
            logger.error(f"Error: {e}", extra=log_context)
            response = error_response(failure_message)

    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@router.post("/api/generate")
async def generate(request: Request) -> JSONResponse:
    """Generate recipe (or cocktail) options for a craving."""

    async def handler(pipeline: RecipePipeline, body: bytes) -> list[dict]:
        return await pipeline.generate(parse_generation_request(body))

    return await _run(request, GENERATE_FAILURE_MESSAGE, handler)


@router.post("/api/edit")
async def edit(request: Request) -> JSONResponse:
    """Edit an existing recipe from a free-text request."""

    async def handler(pipeline: RecipePipeline, body: bytes) -> dict:
        return await pipeline.edit(parse_edit_request(body))

    return await _run(request, EDIT_FAILURE_MESSAGE, handler)


@router.get("/health")
async def health(request: Request) -> dict:
    pipeline = get_pipeline(request)
    return {"status": "ok", "models": list(pipeline.candidates)}
