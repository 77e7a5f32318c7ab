"""
B2 upload client.

Authorizes against Backblaze B2, caches the account session and bucket upload
target across concurrent requests, and uploads files with bounded retries.
"""

from archivist.storage.b2_client import B2Client
from archivist.storage.body import BodyTooLargeError, SpooledBody
from archivist.storage.exceptions import (
    B2Error,
    BackendError,
    CredentialError,
    RateLimitedError,
    RequestTimeoutError,
    ResponseFormatError,
    TransportError,
    UnauthorizedError,
    UploadCancelledError,
)
from archivist.storage.models import AccountCredentials, SessionAuth, UploadRequest, UploadTarget
from archivist.storage.session_cache import SessionCache
from archivist.storage.uploader import UploadExecutor

__all__ = [
    "AccountCredentials",
    "B2Client",
    "B2Error",
    "BackendError",
    "BodyTooLargeError",
    "CredentialError",
    "RateLimitedError",
    "RequestTimeoutError",
    "ResponseFormatError",
    "SessionAuth",
    "SessionCache",
    "SpooledBody",
    "TransportError",
    "UnauthorizedError",
    "UploadCancelledError",
    "UploadExecutor",
    "UploadRequest",
    "UploadTarget",
]
