"""Prompt templates for Sous Chef.

Provides factory functions that render the instruction block sent to Gemini.
Three templates exist: FOOD (default), DRINK and EDIT. Rendering is pure
string construction: the same input always yields the same prompt, and the
user's craving or request is embedded verbatim.
"""

import json

from src.models.models import EditRequest, GenerationRequest, RecipeType


# Literal schema examples embedded in the prompts. The model copies their shape.
FOOD_SCHEMA_EXAMPLE = """[{
  "id": "101", "title": "T", "tagline": "T", "prepTime": 10, "calories": 500,
  "tags": ["T"], "ingredients": [{"item": "I", "amount": "1"}],
  "steps": [{"action": "V", "description": "D"}]
}]"""

DRINK_SCHEMA_EXAMPLE = """[{
  "id": "201", "title": "Cocktail Name", "tagline": "A short, jazzy description", "prepTime": 5, "calories": 150,
  "tags": ["Gin", "Fruity"], "ingredients": [{"item": "Gin", "amount": "50ml"}],
  "steps": [{"action": "Shake", "description": "Shake vigorously with ice."}]
}]"""

EDIT_STRUCTURE_FIELDS = ("id", "title", "tagline", "prepTime", "calories", "tags", "ingredients", "steps")


def _numbered(rules: list[str]) -> str:
    return "\n".join(f"{idx}. {rule}" for idx, rule in enumerate(rules, start=1))


def build_drink_prompt(request: GenerationRequest, options: int = 2) -> str:
    """Render the mixologist prompt.

    The mood line and the ingredient line are only rendered when the request
    carries a mood or at least one ingredient.

    Args:
        request: Validated generation request (type DRINK).
        options: Number of distinct cocktails to ask for.

    Returns:
        str: Prompt text.
    """
    lines = [
        "You are a World-Class Mixologist.",
        f'User Request: "{request.craving}".',
    ]
    if request.mood:
        lines.append(f'The user is feeling: "{request.mood}".')
    if request.ingredients:
        lines.append(f"Use these ingredients if possible: {', '.join(request.ingredients)}.")

    rules = [
        "Create a cocktail recipe.",
        "Use metric measurements (ml, cl, dashes).",
        "Be creative but accessible.",
        "Return ONLY a raw JSON array.",
        f"Return {options} distinct options.",
    ]

    return "\n".join(lines) + "\nRules:\n" + _numbered(rules) + "\nJSON Schema:\n" + DRINK_SCHEMA_EXAMPLE + "\n"


def build_food_prompt(
    request: GenerationRequest,
    options: int = 2,
    max_minutes: int = 60,
    region: str = "Turkey",
) -> str:
    """Render the chef prompt.

    Args:
        request: Validated generation request.
        options: Number of recipes to ask for.
        max_minutes: Cooking time ceiling.
        region: Where the ingredients have to be available.

    Returns:
        str: Prompt text.
    """
    rules = [
        f"Ready in < {max_minutes} mins.",
        (
            f"Use ingredients available in {region}, not necessarily only in a usual supermarket "
            "but also in gourmet supermarkets or asian stores."
        ),
        "Use metric, using spoons for measurements when it makes more sense.",
        (
            "Return recipes only looking at the craving, do not add a regional twist without being asked "
            'e.g. "smash burger" by default is an American smash burger.'
        ),
        "Return ONLY a raw JSON array.",
        f"Return {options} recipes.",
    ]

    return (
        "You are a Michelin-star chef API.\n"
        f'User Request: "{request.craving}".\n'
        "Rules:\n" + _numbered(rules) + "\nJSON Schema:\n" + FOOD_SCHEMA_EXAMPLE + "\n"
    )


def build_generation_prompt(
    request: GenerationRequest,
    options: int = 2,
    max_minutes: int = 60,
    region: str = "Turkey",
) -> str:
    """Pick the DRINK or FOOD template for a generation request."""
    if request.type == RecipeType.DRINK:
        return build_drink_prompt(request, options=options)
    return build_food_prompt(request, options=options, max_minutes=max_minutes, region=region)


def build_edit_prompt(request: EditRequest) -> str:
    """Render the send-back-to-the-kitchen prompt for a recipe edit.

    The original recipe is embedded as compact JSON, exactly as the client
    sent it, so the model sees the structure it must return.
    """
    recipe_json = json.dumps(request.recipe, separators=(",", ":"), ensure_ascii=False)
    rules = [
        "Modify the recipe to accommodate the request.",
        f"Keep the same JSON structure ({', '.join(EDIT_STRUCTURE_FIELDS)}).",
        "Update the 'id' by appending a version suffix (e.g. \"-v2\").",
        (
            "Adjust title/tagline/ingredients/steps/stats logically. "
            "Make as little changes as possible to the original recipe."
        ),
        "Return ONLY a raw JSON object (not an array, just the single modified recipe object).",
    ]

    return (
        "You are a Michelin-star Executive Chef.\n"
        "You have issued a ticket (recipe), but the customer has sent it back with a request.\n\n"
        "ORIGINAL RECIPE JSON:\n"
        f"{recipe_json}\n\n"
        "CUSTOMER REQUEST:\n"
        f'"{request.request}"\n\n'
        "RULES:\n" + _numbered(rules) + "\n"
    )
