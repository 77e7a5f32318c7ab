"""Shared cache of the B2 account session and bucket upload target."""

import asyncio
import logging
from typing import Optional

from archivist.storage.b2_client import B2Client
from archivist.storage.exceptions import BackendError
from archivist.storage.models import AccountCredentials, SessionAuth, UploadTarget

logger = logging.getLogger(__name__)


class SessionCache:
    """Holds the current SessionAuth and UploadTarget for all in-flight uploads.

    Both artifacts are frozen value objects replaced as a whole, so readers
    never observe a URL without its token. Reads and swaps happen between
    awaits and are therefore atomic on the event loop; refreshes are
    serialized by one lock per artifact and re-check the cache after the lock
    is acquired, so callers that queued up behind a refresh reuse its result
    instead of issuing their own. Locks are always taken target first, then
    session.

    With ``eager_session_refresh`` every target refresh also re-authorizes
    the account. Without it the cached session is reused until it is
    invalidated.
    """

    def __init__(
        self,
        b2: B2Client,
        credentials: AccountCredentials,
        eager_session_refresh: bool = True,
    ):
        self._b2 = b2
        self._credentials = credentials
        self.eager_session_refresh = eager_session_refresh

        self._session: Optional[SessionAuth] = None
        self._target: Optional[UploadTarget] = None

        self._session_lock = asyncio.Lock()
        self._target_lock = asyncio.Lock()

    @property
    def session(self) -> Optional[SessionAuth]:
        return self._session

    @property
    def target(self) -> Optional[UploadTarget]:
        return self._target

    async def ensure_session(self) -> SessionAuth:
        """Return the cached session, authorizing the account if there is none.

        Raises:
            CredentialError: If account authorization fails
        """
        session = self._session
        if session is not None:
            return session

        async with self._session_lock:
            if self._session is None:
                self._session = await self._b2.authorize_account(self._credentials)
            return self._session

    async def ensure_upload_target(self, bucket_id: str) -> UploadTarget:
        """Return a cached target for ``bucket_id``, acquiring one if needed.

        Raises:
            CredentialError: If account authorization fails
            BackendError: If B2 refuses to issue an upload URL
        """
        target = self._target
        if target is not None and target.bucket_id == bucket_id:
            return target

        async with self._target_lock:
            target = self._target
            if target is not None and target.bucket_id == bucket_id:
                return target

            if self.eager_session_refresh:
                session = await self._refresh_session()
            else:
                session = await self.ensure_session()

            try:
                target = await self._b2.get_upload_url(session, bucket_id)
            except BackendError as e:
                if e.status_code == 401:
                    logger.info("B2 rejected the account token, dropping the session")
                    self.invalidate_session(stale=session)
                raise

            self._target = target
            return target

    def invalidate_target(self, stale: Optional[UploadTarget] = None) -> None:
        """Forget the upload target, keeping the session.

        If ``stale`` is given, the cache is only cleared while it still holds
        that target; a newer target obtained concurrently is kept.
        """
        if stale is not None and self._target is not stale:
            return
        self._target = None

    def invalidate_session(self, stale: Optional[SessionAuth] = None) -> None:
        """Forget both the session and the upload target."""
        if stale is not None and self._session is not stale:
            return
        self._session = None
        self._target = None

    async def _refresh_session(self) -> SessionAuth:
        async with self._session_lock:
            self._session = await self._b2.authorize_account(self._credentials)
            return self._session
