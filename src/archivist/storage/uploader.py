"""Bounded-retry upload of a single file to B2."""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from archivist.storage.b2_client import B2Client
from archivist.storage.exceptions import (
    B2Error,
    BackendError,
    RateLimitedError,
    RequestTimeoutError,
    ResponseFormatError,
    TransportError,
    UnauthorizedError,
    UploadCancelledError,
)
from archivist.storage.models import (
    UploadAttempt,
    UploadFileResponse,
    UploadOutcome,
    UploadRequest,
    UploadTarget,
)
from archivist.storage.session_cache import SessionCache

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_SECONDS = 1.0

# Failures that consume one attempt and are then retried
RETRYABLE_ERRORS = (
    UnauthorizedError,
    RequestTimeoutError,
    RateLimitedError,
    TransportError,
    BackendError,
)

# Failures after which B2 asks us to slow down before trying again
_BACKOFF_ERRORS = (RequestTimeoutError, RateLimitedError)


class UploadExecutor:
    """Uploads files to B2, retrying transient failures a fixed number of times.

    Upload failures are not uncommon on B2 (nodes go away, pods get busy), so
    every upload gets ``max_attempts`` tries. Failing to obtain credentials
    aborts immediately instead, since retrying the upload cannot fix it.
    """

    def __init__(
        self,
        b2: B2Client,
        cache: SessionCache,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        deadline: Optional[float] = None,
    ):
        """Initialize the executor.

        Args:
            b2: Client performing the raw upload call
            cache: Shared session/target cache
            max_attempts: Attempt budget per upload
            retry_delay: Seconds to sleep after a 408 or 429
            deadline: Optional seconds after which an upload is abandoned
        """
        self._b2 = b2
        self._cache = cache
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.deadline = deadline

    async def upload(self, bucket_id: str, request: UploadRequest) -> str:
        """Upload ``request`` to ``bucket_id`` and return the B2 file id.

        Raises:
            CredentialError: If the account could not be authorized
            BackendError: If no upload URL could be obtained, or as the last
                error once all attempts are used up
            UnauthorizedError, RequestTimeoutError, RateLimitedError,
            TransportError: As the last error once all attempts are used up
            ResponseFormatError: If B2 accepted the file but its answer is unreadable
            UploadCancelledError: If the deadline expired
        """
        if self.deadline is None:
            return await self._upload(bucket_id, request)

        try:
            return await asyncio.wait_for(self._upload(bucket_id, request), self.deadline)
        except asyncio.TimeoutError as e:
            raise UploadCancelledError(
                f"upload of {request.file_name!r} exceeded its {self.deadline}s deadline"
            ) from e

    async def _upload(self, bucket_id: str, request: UploadRequest) -> str:
        attempts: list[UploadAttempt] = []
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._backoff,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                request.body.reset()
                # Target failures propagate straight out of the loop
                try:
                    target = await self._cache.ensure_upload_target(bucket_id)
                except B2Error as e:
                    logger.error(
                        "Could not obtain an upload target",
                        extra={
                            "file_name": request.file_name,
                            "attempts": len(attempts),
                            "error": str(e),
                            "error_type": type(e).__name__,
                        },
                    )
                    raise
                with attempt:
                    ordinal = attempt.retry_state.attempt_number - 1
                    result = await self._attempt(ordinal, target, request)
                    attempts.append(result)
                    if result.error is not None:
                        raise result.error
        except RETRYABLE_ERRORS as e:
            if not attempts or attempts[-1].error is not e:
                raise
            logger.error(
                "Upload failed",
                extra={
                    "file_name": request.file_name,
                    "attempts": len(attempts),
                    "outcomes": [a.outcome.value for a in attempts],
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise

        return result.file_id

    async def _attempt(self, ordinal: int, target: UploadTarget, request: UploadRequest) -> UploadAttempt:
        """Perform one upload call and classify its outcome."""
        try:
            response = await self._b2.upload_file(target, request)
        except TransportError as e:
            logger.error(
                "Failed to make upload request, probably a bad B2 node; requesting a new upload url",
                extra={"attempt": ordinal, "error": str(e)},
            )
            self._cache.invalidate_target(stale=target)
            return UploadAttempt(ordinal, UploadOutcome.TRANSPORT, e)

        status_code = response.status_code

        if response.is_success:
            try:
                parsed = UploadFileResponse.model_validate_json(response.content)
            except ValidationError as e:
                raise ResponseFormatError(f"failed to get id from upload response body: {e}") from e
            return UploadAttempt(ordinal, UploadOutcome.SUCCESS, file_id=parsed.file_id)

        if status_code == 401:
            logger.info("Upload token rejected, requesting a new upload url", extra={"attempt": ordinal})
            self._cache.invalidate_target(stale=target)
            return UploadAttempt(ordinal, UploadOutcome.UNAUTHORIZED, UnauthorizedError("unauthorized"))

        if status_code == 408:
            logger.info("Upload timed out, backing off before retrying", extra={"attempt": ordinal})
            return UploadAttempt(ordinal, UploadOutcome.TIMEOUT, RequestTimeoutError("request timeout"))

        if status_code == 429:
            logger.info("B2 is rate limiting, backing off before retrying", extra={"attempt": ordinal})
            return UploadAttempt(ordinal, UploadOutcome.RATE_LIMITED, RateLimitedError("too many requests"))

        logger.error(
            "Unexpected upload response from B2",
            extra={
                "attempt": ordinal,
                "b2_response_code": status_code,
                "b2_response_body": response.text,
            },
        )
        error = BackendError("upload rejected", status_code=status_code, detail=response.text)
        return UploadAttempt(ordinal, UploadOutcome.BACKEND_ERROR, error)

    def _backoff(self, retry_state: RetryCallState) -> float:
        """Seconds to wait before the next attempt."""
        if retry_state.outcome is not None and isinstance(retry_state.outcome.exception(), _BACKOFF_ERRORS):
            return self.retry_delay
        return 0
