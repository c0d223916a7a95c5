"""
FastAPI application factory + lifespan.

Thin HTTP surface over the widget pipeline:
- Preview rendering for the widget builder.
- Mount / refresh / unmount of live widget instances.
- Read-only widget definitions from widgets.yml.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from widget_pipeline.api.v1 import api_router
from widget_pipeline.core.config import settings
from widget_pipeline.core.log_config import configure_logging
from widget_pipeline.services.orchestrator import dashboard

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: logging.
    Shutdown: unmount every widget so no timer outlives the app.
    """
    configure_logging(settings)
    logger.info(f"[App] Starting {settings.APP_NAME} ({settings.APP_ENV})")

    yield

    dashboard.shutdown()
    logger.info("[App] Shutdown complete")


def create_fastapi_app() -> FastAPI:
    """Application factory for FastAPI."""
    app = FastAPI(
        title="Widget Pipeline API",
        description="Fetch, transform and render dashboard widgets",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": API_VERSION,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled",
        }

    return app


# Module-level instance for ``uvicorn widget_pipeline.main:app``
app = create_fastapi_app()
