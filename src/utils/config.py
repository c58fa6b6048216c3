"""Configuration management for Sous Chef.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


# Model ladder, tried in this order until one returns a usable payload
DEFAULT_GEMINI_MODELS = (
    "gemini-pro-latest",
    "gemini-2.5-flash",
    "gemini-flash-latest",
    "gemini-pro",
)


def _parse_models(raw: str) -> tuple[str, ...]:
    """Split a comma-separated model list, dropping blanks and keeping order."""
    return tuple(model.strip() for model in raw.split(",") if model.strip())


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Gemini API Key: checked per request, a missing key yields a configuration error response
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Candidate models in descending preference order (comma-separated)
        self.GEMINI_MODELS: tuple[str, ...] = _parse_models(
            os.getenv("GEMINI_MODELS", ",".join(DEFAULT_GEMINI_MODELS))
        )
        # Number of options requested per generation. Default: 2
        self.RECIPE_OPTIONS: int = int(os.getenv("RECIPE_OPTIONS", "2"))
        # Cooking time ceiling for food recipes, in minutes. Default: 60
        self.MAX_COOK_MINUTES: int = int(os.getenv("MAX_COOK_MINUTES", "60"))
        # Where the cook shops: ingredients must be available there
        self.INGREDIENT_REGION: str = os.getenv("INGREDIENT_REGION", "Turkey")
        # Server bind address and port
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "7777"))

    def validate(self) -> None:
        """Validate configuration values.

        The API key is deliberately not required here: its absence is reported
        to callers as a configuration error on each request.

        Raises:
            ValueError: If the model ladder is empty or a numeric value is out of range.
        """
        if not self.GEMINI_MODELS:
            raise ValueError("GEMINI_MODELS must list at least one model")
        if self.RECIPE_OPTIONS < 1:
            raise ValueError(f"RECIPE_OPTIONS must be at least 1, got: {self.RECIPE_OPTIONS}")
        if self.MAX_COOK_MINUTES < 1:
            raise ValueError(f"MAX_COOK_MINUTES must be at least 1, got: {self.MAX_COOK_MINUTES}")
        if not (1 <= self.PORT <= 65535):
            raise ValueError(f"PORT must be between 1 and 65535, got: {self.PORT}")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
