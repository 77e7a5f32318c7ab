"""Health check endpoint for Archivist."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Does not touch B2, so it stays fast while the backend is slow or down.

    Returns:
        dict: Health status response with status, service, and version fields
    """
    app_settings = request.app.state.settings
    return {
        "status": "ok",
        "service": app_settings.SERVICE_NAME,
        "version": app_settings.SERVICE_VERSION,
    }
