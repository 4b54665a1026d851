"""
Shared helpers for route modules.
"""

from fastapi import UploadFile
from fastapi.responses import JSONResponse
import structlog

from config import settings
from exceptions import AppError, UploadTooLargeError

logger = structlog.get_logger(__name__)


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


async def read_upload(file: UploadFile) -> bytes:
    """
    Read an uploaded file, enforcing the size limit.

    Raises:
        UploadTooLargeError: If the file exceeds MAX_UPLOAD_SIZE_MB
    """
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise UploadTooLargeError(file.filename or "", settings.max_upload_bytes)
    return content
