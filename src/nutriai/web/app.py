"""
NutriAI Web - FastAPI application.

Hosts the onboarding router for the mobile client.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nutriai import __version__
from nutriai.config import configure_logging, settings
from onboarding.api import router as onboarding_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI app."""
    configure_logging()

    app = FastAPI(title="NutriAI", version=__version__)

    # Expo dev server
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                "http://localhost:8081",
                "http://127.0.0.1:8081",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(onboarding_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.info(f"NutriAI {__version__} starting ({settings.nutriai_env})")
    return app


app = create_app()
