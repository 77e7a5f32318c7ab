"""Upload data models."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Response model for a stored file."""

    id: str
    name: str
    media_type: str
    sha1: str
    size: int
