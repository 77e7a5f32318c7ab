"""HTTP client for the Backblaze B2 native API.

Each method performs exactly one exchange with B2 and maps failures onto the
exceptions in :mod:`archivist.storage.exceptions`. Caching and retries live
in :class:`~archivist.storage.session_cache.SessionCache` and
:class:`~archivist.storage.uploader.UploadExecutor`.
"""

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from archivist.core.config import DEFAULT_B2_AUTHORIZE_URL
from archivist.storage.exceptions import BackendError, CredentialError, TransportError
from archivist.storage.models import (
    AccountCredentials,
    AuthorizeAccountResponse,
    GetUploadUrlResponse,
    SessionAuth,
    UploadRequest,
    UploadTarget,
)

logger = logging.getLogger(__name__)

GET_UPLOAD_URL_PATH = "/b2api/v2/b2_get_upload_url"


def encode_file_name(file_name: str) -> str:
    """Percent-encode a file name for the X-Bz-File-Name header."""
    return quote(file_name, safe="/")


class B2Client:
    """Thin wrapper around the three B2 calls needed to upload a file."""

    def __init__(self, http_client: httpx.AsyncClient, authorize_url: str = DEFAULT_B2_AUTHORIZE_URL):
        """Initialize the client.

        Args:
            http_client: Shared async HTTP client (owns the connection pool)
            authorize_url: Fixed b2_authorize_account endpoint
        """
        self.http_client = http_client
        self.authorize_url = authorize_url

    async def authorize_account(self, credentials: AccountCredentials) -> SessionAuth:
        """Exchange the application key for an API URL and account token.

        Raises:
            CredentialError: On transport failure, non-2xx status, or a body
                missing apiUrl/authorizationToken
        """
        try:
            response = await self.http_client.get(
                self.authorize_url,
                auth=(credentials.key_id, credentials.key_token),
            )
        except httpx.RequestError as e:
            raise CredentialError(f"failed to do authorize account request: {e}") from e

        if not response.is_success:
            raise CredentialError(
                f"failed to authorize account (status {response.status_code}): {response.text}"
            )

        try:
            parsed = AuthorizeAccountResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise CredentialError(f"malformed authorize account response: {e}") from e

        logger.info(
            "Authorized B2 account",
            extra={"b2_key_id": credentials.key_id, "b2_api_url": parsed.api_url},
        )
        return SessionAuth(api_url=parsed.api_url, api_token=parsed.authorization_token)

    async def get_upload_url(self, session: SessionAuth, bucket_id: str) -> UploadTarget:
        """Obtain an upload URL and token for ``bucket_id``.

        Raises:
            BackendError: On transport failure, non-2xx status (with the
                response body as detail), or a malformed body
        """
        try:
            response = await self.http_client.post(
                f"{session.api_url}{GET_UPLOAD_URL_PATH}",
                headers={"Authorization": session.api_token},
                json={"bucketId": bucket_id},
            )
        except httpx.RequestError as e:
            raise BackendError(f"failed to do get upload url request: {e}") from e

        if not response.is_success:
            raise BackendError(
                "failed to get upload url",
                status_code=response.status_code,
                detail=response.text,
            )

        try:
            parsed = GetUploadUrlResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise BackendError(
                "malformed get upload url response",
                status_code=response.status_code,
                detail=str(e),
            ) from e

        logger.info("Obtained B2 upload url", extra={"b2_bucket_id": bucket_id})
        return UploadTarget(
            bucket_id=bucket_id,
            upload_url=parsed.upload_url,
            upload_auth_token=parsed.authorization_token,
        )

    async def upload_file(self, target: UploadTarget, request: UploadRequest) -> httpx.Response:
        """POST the request body to the upload URL.

        The body is streamed from its current position; callers reset it
        beforehand. The response is returned unclassified.

        Raises:
            TransportError: If the request could not be completed at all
        """
        headers = {
            "Authorization": target.upload_auth_token,
            "X-Bz-File-Name": encode_file_name(request.file_name),
            "Content-Type": request.media_type,
            "Content-Length": str(request.size),
            "X-Bz-Content-Sha1": request.sha1,
        }
        try:
            return await self.http_client.post(
                target.upload_url,
                headers=headers,
                content=request.body.chunks(),
            )
        except httpx.RequestError as e:
            raise TransportError(f"failed to make upload request: {e}") from e
