"""Recipe generation and editing pipeline.

Wires prompt building, the model fallback ladder and payload shape checks:

    request -> prompt -> ModelFallbackRunner (call -> extract -> parse -> shape check) -> recipes

Configuration (API key, model ladder, prompt settings) is injected at
construction time. build_pipeline() creates an instance from the process config.
"""

import re
from typing import Any, Optional, Sequence

from src.llm.extraction import JsonShape, PayloadError
from src.llm.fallback import AllCandidatesExhaustedError, ModelCall, ModelFallbackRunner
from src.llm.gemini import GeminiModelCaller
from src.models.models import EditRequest, GenerationRequest
from src.prompts.prompts import build_edit_prompt, build_generation_prompt
from src.utils.config import Config
from src.utils.logger import logger

# Fields an edited recipe must carry (non-null) to be accepted
REQUIRED_EDIT_FIELDS = ("id", "title", "tagline", "prepTime", "calories", "tags", "ingredients", "steps")

_VERSION_SUFFIX = re.compile(r"^(?P<base>.+)-v(?P<version>\d+)$")


class ConfigurationError(ValueError):
    """The server is missing configuration it needs to call Gemini."""


def next_version_id(recipe_id: str) -> str:
    """Return the id of the next edit of a recipe.

    >>> next_version_id("101")
    '101-v2'
    >>> next_version_id("101-v2")
    '101-v3'
    """
    match = _VERSION_SUFFIX.match(recipe_id)
    if match:
        return f"{match.group('base')}-v{int(match.group('version')) + 1}"
    return f"{recipe_id}-v2"


def _base_id(recipe_id: str) -> str:
    match = _VERSION_SUFFIX.match(recipe_id)
    return match.group("base") if match else recipe_id


def validate_recipe_batch(payload: Any) -> list:
    """Accept any JSON array as a batch of recipes, items untouched.

    Raises:
        PayloadError: If the payload is not an array.
    """
    if not isinstance(payload, list):
        raise PayloadError(f"Expected a JSON array of recipes, got {type(payload).__name__}")
    return payload


def validate_edited_recipe(payload: Any, original_id: str) -> dict:
    """Accept a single edited recipe object.

    Every structural field must be present and non-null; other keys pass
    through untouched. The id must follow the version-suffix convention
    relative to the original; when the model kept the original id (or
    invented an unrelated one) a copy is returned with next_version_id(original_id).

    Raises:
        PayloadError: If the payload is not an object or misses a field.
    """
    if not isinstance(payload, dict):
        raise PayloadError(f"Expected a JSON object, got {type(payload).__name__}")

    missing = [name for name in REQUIRED_EDIT_FIELDS if payload.get(name) is None]
    if missing:
        raise PayloadError(f"Edited recipe is missing fields: {', '.join(missing)}")

    edited_id = payload["id"]
    follows_convention = (
        isinstance(edited_id, str)
        and edited_id != original_id
        and _VERSION_SUFFIX.match(edited_id) is not None
        and _base_id(edited_id) == _base_id(original_id)
    )
    if follows_convention:
        return payload
    return {**payload, "id": next_version_id(original_id)}


class RecipePipeline:
    """Generate and edit recipes through the Gemini model ladder."""

    def __init__(
        self,
        api_key: str,
        candidates: Sequence[str],
        call_model: Optional[ModelCall] = None,
        options: int = 2,
        max_minutes: int = 60,
        region: str = "Turkey",
    ) -> None:
        """Initialize the pipeline.

        Args:
            api_key: Gemini API key. May be empty: generate/edit then raise ConfigurationError.
            candidates: Model ids in descending preference order.
            call_model: Outbound call override (tests, alternative transports).
                Defaults to GeminiModelCaller(api_key), created lazily.
            options: Recipes requested per generation.
            max_minutes: Cooking time ceiling for food prompts.
            region: Region whose shops the food prompt assumes.
        """
        self.api_key = api_key
        self.candidates = tuple(candidates)
        self.options = options
        self.max_minutes = max_minutes
        self.region = region
        self._call_model = call_model
        self._runner: Optional[ModelFallbackRunner] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

    @property
    def runner(self) -> ModelFallbackRunner:
        if self._runner is None:
            call_model = self._call_model or GeminiModelCaller(self.api_key)
            self._runner = ModelFallbackRunner(call_model, self.candidates)
        return self._runner

    async def generate(self, request: GenerationRequest) -> list:
        """Generate a batch of recipes (or cocktails) for a craving.

        Returns:
            The parsed JSON array, items as the model returned them.

        Raises:
            ConfigurationError: If no API key is configured (checked before any call).
            AllCandidatesExhaustedError: If no candidate produced a valid batch.
        """
        self._ensure_configured()
        logger.info(f'Processing request for: "{request.craving}" (Type: {request.type.value})')

        prompt = build_generation_prompt(
            request,
            options=self.options,
            max_minutes=self.max_minutes,
            region=self.region,
        )
        outcome = await self.runner.run(prompt, JsonShape.ARRAY, validate=validate_recipe_batch)

        try:
            recipes = outcome.unwrap()
        except AllCandidatesExhaustedError as e:
            logger.error(f"Generation failed for \"{request.craving}\": {e}")
            raise

        logger.info(f"Generated {len(recipes)} recipe(s) with {outcome.model}")
        return recipes

    async def edit(self, request: EditRequest) -> dict:
        """Apply a free-text change request to a recipe.

        Returns:
            The edited recipe dict, id carrying the next version suffix.

        Raises:
            ConfigurationError: If no API key is configured (checked before any call).
            AllCandidatesExhaustedError: If no candidate produced a valid recipe.
        """
        self._ensure_configured()
        original_id = request.recipe_id
        logger.info(f'Processing edit request for Recipe #{original_id}: "{request.request}"')

        prompt = build_edit_prompt(request)
        outcome = await self.runner.run(
            prompt,
            JsonShape.OBJECT,
            validate=lambda payload: validate_edited_recipe(payload, original_id),
        )

        try:
            recipe = outcome.unwrap()
        except AllCandidatesExhaustedError as e:
            logger.error(f"Edit failed for Recipe #{original_id}: {e}")
            raise

        logger.info(f"Recipe #{original_id} edited into #{recipe['id']} with {outcome.model}")
        return recipe


def build_pipeline(settings: Config) -> RecipePipeline:
    """Create a pipeline from application configuration."""
    return RecipePipeline(
        api_key=settings.GEMINI_API_KEY,
        candidates=settings.GEMINI_MODELS,
        options=settings.RECIPE_OPTIONS,
        max_minutes=settings.MAX_COOK_MINUTES,
        region=settings.INGREDIENT_REGION,
    )
