"""Main application entrypoint for Archivist."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from archivist.api.v1 import routes_health
from archivist.api.v1.routes_upload import router as upload_router
from archivist.core.config import Settings, settings
from archivist.core.logging import setup_logging
from archivist.core.middleware import RequestLoggingMiddleware
from archivist.core.request_id import RequestIDMiddleware
from archivist.storage.factory import create_http_client, create_uploader

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the B2 HTTP client and upload pipeline for the app's lifetime."""
    app_settings: Settings = app.state.settings
    http_client = create_http_client(app_settings)
    app.state.uploader = create_uploader(app_settings, http_client)
    logger.info(
        "Upload pipeline initialized",
        extra={"b2_key_id": app_settings.B2_KEY_ID, "b2_bucket_id": app_settings.B2_BUCKET_ID},
    )

    yield

    await http_client.aclose()
    app.state.uploader = None


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment-derived singleton

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app_settings = app_settings or settings

    # Initialize logging first
    setup_logging(app_settings)

    app = FastAPI(
        title=app_settings.SERVICE_NAME,
        version=app_settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Last added runs first, so the request id is bound before the access log
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(upload_router)

    return app


# Export app instance for ASGI servers
app = create_app()
