"""Construction of the upload pipeline from settings."""

import httpx

from archivist.core.config import Settings
from archivist.storage.b2_client import B2Client
from archivist.storage.models import AccountCredentials
from archivist.storage.session_cache import SessionCache
from archivist.storage.uploader import UploadExecutor


def create_http_client(app_settings: Settings) -> httpx.AsyncClient:
    """Create the pooled HTTP client shared by all B2 calls."""
    return httpx.AsyncClient(
        timeout=app_settings.REQUEST_TIMEOUT,
        limits=httpx.Limits(
            max_connections=app_settings.HTTP_MAX_CONNECTIONS,
            max_keepalive_connections=app_settings.HTTP_MAX_CONNECTIONS,
            keepalive_expiry=app_settings.HTTP_KEEPALIVE_EXPIRY,
        ),
    )


def create_uploader(app_settings: Settings, http_client: httpx.AsyncClient) -> UploadExecutor:
    """Wire B2Client, SessionCache and UploadExecutor together."""
    b2 = B2Client(http_client, authorize_url=app_settings.B2_AUTHORIZE_URL)
    cache = SessionCache(
        b2,
        AccountCredentials(key_id=app_settings.B2_KEY_ID, key_token=app_settings.B2_KEY_TOKEN),
        eager_session_refresh=app_settings.EAGER_SESSION_REFRESH,
    )
    return UploadExecutor(
        b2,
        cache,
        max_attempts=app_settings.UPLOAD_MAX_ATTEMPTS,
        retry_delay=app_settings.UPLOAD_RETRY_DELAY_SECONDS,
        deadline=app_settings.UPLOAD_DEADLINE_SECONDS,
    )
