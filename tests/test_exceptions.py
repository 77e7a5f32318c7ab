"""Smoke tests for upload client exceptions."""

import pytest

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
from archivist.storage.uploader import RETRYABLE_ERRORS


def test_exception_hierarchy():
    """Test that all exceptions inherit from B2Error."""
    for exc_type in (
        CredentialError,
        BackendError,
        UnauthorizedError,
        RequestTimeoutError,
        RateLimitedError,
        TransportError,
        UploadCancelledError,
        ResponseFormatError,
    ):
        assert issubclass(exc_type, B2Error)


def test_timeout_error_does_not_shadow_builtin():
    """RequestTimeoutError is a B2 status, not an asyncio/OS timeout."""
    assert not issubclass(RequestTimeoutError, TimeoutError)


def test_backend_error_carries_status_and_detail():
    error = BackendError("upload rejected", status_code=503, detail='{"code": "service_unavailable"}')

    assert error.status_code == 503
    assert error.detail == '{"code": "service_unavailable"}'
    assert str(error) == 'upload rejected: {"code": "service_unavailable"}'


def test_backend_error_without_detail():
    assert str(BackendError("failed to get upload url")) == "failed to get upload url"


def test_retryable_classification():
    """Only per-attempt failures are retried; credential and parse failures are not."""
    assert CredentialError not in RETRYABLE_ERRORS
    assert ResponseFormatError not in RETRYABLE_ERRORS
    assert UploadCancelledError not in RETRYABLE_ERRORS
    assert set(RETRYABLE_ERRORS) == {
        UnauthorizedError,
        RequestTimeoutError,
        RateLimitedError,
        TransportError,
        BackendError,
    }


def test_exceptions_can_be_caught_as_base():
    with pytest.raises(B2Error):
        raise CredentialError("bad key")

    with pytest.raises(B2Error):
        raise TransportError("connection refused")
