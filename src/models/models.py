"""Data models and schemas for Sous Chef.

Defines Pydantic models for request/response validation.

Recipes themselves are plain JSON objects (id, title, tagline, prepTime,
calories, tags, ingredients, steps). They travel through the service as
parsed, so keys the model adds are kept and nothing is filled in.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class RecipeType(str, Enum):
    """What the user is craving: something to eat or something to drink."""

    FOOD = "FOOD"
    DRINK = "DRINK"


def _require_text(value: str, name: str) -> str:
    """Reject blank text but hand back the original, whitespace included."""
    if not value.strip():
        raise ValueError(f"{name} must not be blank")
    return value


class GenerationRequest(BaseModel):
    """Request schema for /api/generate."""

    craving: Annotated[str, Field(min_length=1, description="What the user feels like, kept verbatim")]
    type: RecipeType = RecipeType.FOOD
    ingredients: Annotated[List[str], Field(default_factory=list, description="Drink-only ingredient wishes")]
    mood: Optional[str] = None

    @field_validator("craving")
    @classmethod
    def craving_not_blank(cls, value: str) -> str:
        return _require_text(value, "craving")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> RecipeType:
        """Anything that is not DRINK is treated as FOOD."""
        if isinstance(value, str) and value.strip().upper() == RecipeType.DRINK.value:
            return RecipeType.DRINK
        if value is RecipeType.DRINK:
            return value
        return RecipeType.FOOD

    @field_validator("ingredients", mode="before")
    @classmethod
    def normalize_ingredients(cls, value: Any) -> List[str]:
        """Accept a list or a comma-separated string; drop blanks and duplicates, keep order."""
        if not value:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, list):
            raise ValueError("ingredients must be a list of strings")
        cleaned = [str(item).strip() for item in value if item is not None and str(item).strip()]
        return list(dict.fromkeys(cleaned))

    @field_validator("mood", mode="before")
    @classmethod
    def blank_mood_is_none(cls, value: Any) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EditRequest(BaseModel):
    """Request schema for /api/edit.

    The recipe is kept exactly as the client sent it; only its id is required.
    """

    recipe: Dict[str, Any]
    request: Annotated[str, Field(min_length=1, description="Free-text modification request, kept verbatim")]

    @field_validator("recipe")
    @classmethod
    def recipe_has_id(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        recipe_id = value.get("id")
        if isinstance(recipe_id, bool) or not isinstance(recipe_id, (str, int)) or not str(recipe_id).strip():
            raise ValueError("recipe must carry a string or numeric id")
        return value

    @field_validator("request")
    @classmethod
    def request_not_blank(cls, value: str) -> str:
        return _require_text(value, "request")

    @property
    def recipe_id(self) -> str:
        return str(self.recipe["id"])


class ErrorResponse(BaseModel):
    """Body returned on any failure."""

    error: str
