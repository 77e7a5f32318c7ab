"""Upload API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from archivist.core.config import Settings
from archivist.models.upload import UploadResponse
from archivist.storage.body import BodyTooLargeError, SpooledBody
from archivist.storage.exceptions import B2Error
from archivist.storage.models import UploadRequest
from archivist.storage.uploader import UploadExecutor

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)

FILE_NAME_HEADER = "Archivist-File-Name"


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the application was built with."""
    return request.app.state.settings


def get_uploader(request: Request) -> UploadExecutor:
    """Dependency returning the shared upload executor from app state."""
    uploader = getattr(request.app.state, "uploader", None)
    if uploader is None:
        logger.error("Upload executor not available in application state")
        raise HTTPException(status_code=503, detail="Uploader not ready")
    return uploader


@router.post("/", response_model=UploadResponse)
async def upload_file(
    request: Request,
    uploader: UploadExecutor = Depends(get_uploader),
    app_settings: Settings = Depends(get_settings),
):
    """Store the raw request body as a file in the configured B2 bucket.

    The file name comes from the Archivist-File-Name header and the media
    type from Content-Type; both are required.
    """
    file_name = request.headers.get(FILE_NAME_HEADER, "")
    media_type = request.headers.get("content-type", "")

    if not file_name or not media_type:
        logger.warning(
            "Bad request, name or media type missing",
            extra={"file_name": file_name, "file_media_type": media_type},
        )
        return PlainTextResponse("file name and media type required", status_code=400)

    try:
        body = await SpooledBody.from_stream(
            request.stream(),
            max_bytes=app_settings.max_upload_bytes,
            max_memory_bytes=app_settings.spool_max_memory_bytes,
        )
    except BodyTooLargeError:
        logger.warning("Bad request, body too large", extra={"file_name": file_name})
        return PlainTextResponse(
            f"file size exceeds maximum allowed size of {app_settings.MAX_UPLOAD_MB}MB",
            status_code=400,
        )
    except Exception as e:
        logger.error(f"Failed to read body: {e}", exc_info=True)
        return PlainTextResponse("internal server error", status_code=500)

    with body:
        upload_request = UploadRequest(
            file_name=file_name,
            media_type=media_type,
            sha1=body.sha1,
            size=body.size,
            body=body,
        )

        try:
            file_id = await uploader.upload(app_settings.B2_BUCKET_ID, upload_request)
        except B2Error as e:
            logger.error(
                f"Failed to upload file: {e}",
                extra={"file_name": file_name, "error_type": type(e).__name__},
                exc_info=True,
            )
            return PlainTextResponse("internal server error", status_code=500)

    logger.info(
        "File successfully uploaded",
        extra={
            "file_id": file_id,
            "file_name": file_name,
            "file_media_type": media_type,
            "file_hash": upload_request.sha1,
            "file_size": upload_request.size,
        },
    )

    return UploadResponse(
        id=file_id,
        name=file_name,
        media_type=media_type,
        sha1=upload_request.sha1,
        size=upload_request.size,
    )
