# backend/tutorcenter/main.py
"""
FastAPI application for the tutoring-center backend.

Run locally with:
    uvicorn tutorcenter.main:app --reload
"""

import logging

from fastapi import APIRouter, FastAPI

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION
from .errors import register_error_handlers
from .routes import prometheus
from .routes.v1 import health as health_v1, session_generation as session_generation_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the application with routers and error handlers mounted."""
    application = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # Register unified error envelope handlers
    register_error_handlers(application)

    # Create API v1 router
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(health_v1.router, prefix="/health")
    api_v1.include_router(session_generation_v1.router, prefix="/sessions")
    application.include_router(api_v1)

    # Prometheus scrape endpoint lives outside the versioned API
    application.include_router(prometheus.router)

    logger.info(f"{API_TITLE} {API_VERSION} starting in {settings.environment} mode")
    return application


app = create_app()

fastapi_app = app

__all__ = ["app", "create_app", "fastapi_app"]
