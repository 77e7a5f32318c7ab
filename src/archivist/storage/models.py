"""Upload client data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from archivist.storage.body import SpooledBody


@dataclass(frozen=True)
class AccountCredentials:
    """Long-lived B2 application key."""

    key_id: str
    key_token: str = field(repr=False)


@dataclass(frozen=True)
class SessionAuth:
    """Account-level authorization returned by b2_authorize_account."""

    api_url: str
    api_token: str = field(repr=False)


@dataclass(frozen=True)
class UploadTarget:
    """Bucket-scoped upload URL and token returned by b2_get_upload_url."""

    bucket_id: str
    upload_url: str
    upload_auth_token: str = field(repr=False)


class UploadOutcome(str, Enum):
    """Classification of a single upload attempt."""

    SUCCESS = "success"
    UNAUTHORIZED = "unauthorized"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    TRANSPORT = "transport"
    BACKEND_ERROR = "backend_error"


@dataclass
class UploadAttempt:
    """Result of one try within the retry loop."""

    ordinal: int
    outcome: UploadOutcome
    error: Optional[Exception] = None
    file_id: Optional[str] = None


@dataclass
class UploadRequest:
    """One file to upload, with its pre-computed SHA-1 digest."""

    file_name: str
    media_type: str
    sha1: str
    size: int
    body: SpooledBody

    def __post_init__(self):
        if not self.file_name:
            raise ValueError("file_name is required")
        if not self.media_type:
            raise ValueError("media_type is required")


class _B2Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AuthorizeAccountResponse(_B2Response):
    """Body of a successful b2_authorize_account call."""

    api_url: str = Field(alias="apiUrl", min_length=1)
    authorization_token: str = Field(alias="authorizationToken", min_length=1)


class GetUploadUrlResponse(_B2Response):
    """Body of a successful b2_get_upload_url call."""

    upload_url: str = Field(alias="uploadUrl", min_length=1)
    authorization_token: str = Field(alias="authorizationToken", min_length=1)
    bucket_id: Optional[str] = Field(default=None, alias="bucketId")


class UploadFileResponse(_B2Response):
    """Body of a successful b2_upload_file call."""

    file_id: str = Field(alias="fileId", min_length=1)
    file_name: Optional[str] = Field(default=None, alias="fileName")
    content_length: Optional[int] = Field(default=None, alias="contentLength")
