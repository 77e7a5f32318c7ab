"""Custom exceptions for the B2 upload client."""

from typing import Optional


class B2Error(Exception):
    """Base exception for B2 upload failures."""
    pass


class CredentialError(B2Error):
    """Exception raised when account authorization is rejected or malformed."""
    pass


class BackendError(B2Error):
    """Exception raised when B2 answers with an unexpected non-2xx status.

    ``detail`` carries the response body verbatim.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        message = super().__str__()
        if self.detail:
            return f"{message}: {self.detail}"
        return message


class UnauthorizedError(B2Error):
    """Exception raised when the upload target's token is rejected mid-upload."""
    pass


class RequestTimeoutError(B2Error):
    """Exception raised when B2 answers an upload with 408."""
    pass


class RateLimitedError(B2Error):
    """Exception raised when B2 answers an upload with 429."""
    pass


class TransportError(B2Error):
    """Exception raised when B2 could not be reached at all."""
    pass


class UploadCancelledError(B2Error):
    """Exception raised when an upload is abandoned because its deadline expired."""
    pass


class ResponseFormatError(B2Error):
    """Exception raised when a successful upload response cannot be parsed."""
    pass
