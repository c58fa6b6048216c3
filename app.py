"""Sous Chef Application - Recipe and Cocktail Generator Service.

Single entry point for the HTTP service:
- Builds the recipe pipeline from environment configuration
- Registers the generate / edit / health routes
- Serves the REST API (and OpenAPI docs at /docs) with uvicorn

Run with: python app.py
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI

from src.api.routes import router
from src.pipeline.recipe_pipeline import RecipePipeline, build_pipeline
from src.utils.config import config
from src.utils.logger import logger


def create_app(pipeline: Optional[RecipePipeline] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        pipeline: Pipeline to serve. Defaults to one built from the process config.

    Returns:
        Configured FastAPI instance.
    """
    if pipeline is None:
        pipeline = build_pipeline(config)

    if not pipeline.is_configured:
        logger.warning("GEMINI_API_KEY is not set: every request will answer with a configuration error")

    application = FastAPI(
        title="Sous Chef",
        description="AI recipe and cocktail generator",
    )
    application.state.pipeline = pipeline
    application.include_router(router)

    logger.info(f"Model ladder: {', '.join(pipeline.candidates)}")
    return application


app = create_app()


if __name__ == "__main__":
    logger.info(f"Starting Sous Chef on port {config.PORT}")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host=config.HOST, port=config.PORT)
