"""Pytest configuration and shared fixtures."""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Union

import httpx
import pytest

from archivist.storage.b2_client import B2Client
from archivist.storage.body import SpooledBody
from archivist.storage.models import AccountCredentials, UploadRequest
from archivist.storage.session_cache import SessionCache
from archivist.storage.uploader import UploadExecutor

AUTHORIZE_URL = "https://api.backblazeb2.com/b2api/v2/b2_authorize_account"
API_URL = "https://api001.backblazeb2.com"
UPLOAD_HOST = "https://pod-000-1000-00.backblaze.com"


@dataclass
class RecordedUpload:
    """One upload call as seen by the fake backend."""

    token: str
    body: bytes
    headers: httpx.Headers


@dataclass
class FakeB2:
    """In-process stand-in for the three B2 endpoints.

    ``upload_script`` lists what successive upload calls answer: an int is a
    status code, an exception instance is raised as a transport failure.
    ``upload_url_script`` does the same for upload url calls, falling back to
    ``upload_url_status``. Once the upload script runs out every upload succeeds.
    """

    authorize_status: int = 200
    authorize_body: Optional[dict] = None
    revoke_after_uploads: Optional[int] = None
    upload_url_status: int = 200
    upload_url_script: List[int] = field(default_factory=list)
    upload_url_body: Optional[dict] = None
    upload_script: List[Union[int, Exception]] = field(default_factory=list)
    upload_success_body: Optional[dict] = None
    delay: float = 0.0
    upload_delay: float = 0.0

    authorize_calls: int = 0
    upload_url_calls: int = 0
    uploads: List[RecordedUpload] = field(default_factory=list)
    upload_url_tokens: List[str] = field(default_factory=list)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if path.endswith("/b2_authorize_account"):
            self.authorize_calls += 1
            await asyncio.sleep(self.delay)
            if self.revoke_after_uploads is not None and len(self.uploads) >= self.revoke_after_uploads:
                self.authorize_status = 401
            if self.authorize_status != 200:
                return httpx.Response(
                    self.authorize_status,
                    json={"status": self.authorize_status, "code": "unauthorized", "message": "bad key"},
                )
            body = self.authorize_body or {
                "accountId": "acct",
                "apiUrl": API_URL,
                "authorizationToken": f"api-token-{self.authorize_calls}",
            }
            return httpx.Response(200, json=body)

        if path.endswith("/b2_get_upload_url"):
            self.upload_url_calls += 1
            self.upload_url_tokens.append(request.headers["Authorization"])
            await asyncio.sleep(self.delay)
            status = self.upload_url_script.pop(0) if self.upload_url_script else self.upload_url_status
            if status != 200:
                return httpx.Response(status, json={"status": status, "code": "service_unavailable"})
            if self.upload_url_body is not None:
                return httpx.Response(200, json=self.upload_url_body)
            n = self.upload_url_calls
            return httpx.Response(
                200,
                json={
                    "bucketId": "b1",
                    "uploadUrl": f"{UPLOAD_HOST}/b2api/v2/b2_upload_file/b1/{n}",
                    "authorizationToken": f"upload-token-{n}",
                },
            )

        if "/b2_upload_file/" in path:
            self.uploads.append(
                RecordedUpload(
                    token=request.headers["Authorization"],
                    body=request.content,
                    headers=request.headers,
                )
            )
            n = len(self.uploads)
            await asyncio.sleep(self.upload_delay)
            step = self.upload_script.pop(0) if self.upload_script else 200
            if isinstance(step, Exception):
                raise step
            if step == 200 and self.upload_success_body is not None:
                return httpx.Response(200, json=self.upload_success_body)
            if step == 200:
                return httpx.Response(
                    200,
                    json={
                        "fileId": f"file-{n}",
                        "fileName": request.headers["X-Bz-File-Name"],
                        "contentLength": len(request.content),
                    },
                )
            return httpx.Response(step, json={"status": step, "code": f"error_{step}"})

        return httpx.Response(404, json={"code": "not_found"})


def _make_body(data: bytes) -> SpooledBody:
    body = SpooledBody()
    body.write(data)
    body.seal()
    return body


def _make_request(data: bytes = b"hello", file_name: str = "a.txt", media_type: str = "text/plain") -> UploadRequest:
    body = _make_body(data)
    return UploadRequest(
        file_name=file_name,
        media_type=media_type,
        sha1=body.sha1,
        size=body.size,
        body=body,
    )


@pytest.fixture
def make_body():
    """Factory for sealed bodies holding the given bytes."""
    return _make_body


@pytest.fixture
def make_request():
    """Factory for upload requests over a sealed in-memory body."""
    return _make_request


@pytest.fixture
def fake_b2():
    return FakeB2()


@pytest.fixture
def http_client(fake_b2):
    """HTTP client whose every request is answered by the fake backend."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_b2.handler))


@pytest.fixture
def b2_client(http_client):
    return B2Client(http_client, authorize_url=AUTHORIZE_URL)


@pytest.fixture
def credentials():
    return AccountCredentials(key_id="k1", key_token="t1")


@pytest.fixture
def session_cache(b2_client, credentials):
    return SessionCache(b2_client, credentials)


@pytest.fixture
def uploader(b2_client, session_cache):
    return UploadExecutor(b2_client, session_cache, retry_delay=0)
