"""
Upload routes for the three input sets.
"""

from fastapi import APIRouter, UploadFile, File
import structlog

from exceptions import EmptyUploadError
from models.product_sheet import (
    DatabaseUploadResponse,
    LabelUploadResponse,
    ImageUploadResponse,
    SkippedFile,
)
from routes.helpers import handle_error, read_upload
from services.ingestion_service import get_ingestion_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])


@router.post("/database", response_model=DatabaseUploadResponse)
async def upload_database(
    file: UploadFile = File(..., description="Product database (.csv or .xlsx)")
):
    """
    Upload the product database.

    Replaces any previously uploaded database.

    Raises:
        422: File empty, unreadable, or without an 'id' column
    """
    logger.info("database_upload_started", filename=file.filename)

    try:
        content = await read_upload(file)
        if not content:
            raise EmptyUploadError(file.filename)

        result = get_ingestion_service().load_database(content, file.filename)

        return DatabaseUploadResponse(
            filename=file.filename or "",
            rows=len(result.rows),
            columns=result.columns,
            skipped_rows=len(result.skipped_rows),
        )

    except Exception as e:
        return handle_error(e)


@router.post("/labels", response_model=LabelUploadResponse)
async def upload_labels(
    files: list[UploadFile] = File(..., description="Label text files (.txt)")
):
    """
    Upload garment label files.

    Each file is parsed on its own; files without a product ID are
    reported in `skipped`. Labels add to those already uploaded.
    """
    logger.info("labels_upload_started", count=len(files))

    try:
        payload = []
        for file in files:
            payload.append((file.filename or "", await read_upload(file)))

        service = get_ingestion_service()
        result = service.add_labels(payload)

        return LabelUploadResponse(
            extracted=result.extracted_ids,
            skipped=[SkippedFile(filename=name, reason=reason) for name, reason in result.skipped],
            total_labels=len(service.state.labels),
        )

    except Exception as e:
        return handle_error(e)


@router.post("/images", response_model=ImageUploadResponse)
async def upload_images(
    files: list[UploadFile] = File(..., description="Product photos named <id>_<anything>.<ext>")
):
    """
    Upload product photos.

    The product ID is the filename part before the first underscore. A
    photo for an ID that already has one replaces it.
    """
    logger.info("images_upload_started", count=len(files))

    try:
        payload = []
        for file in files:
            payload.append((file.filename or "", await read_upload(file), file.content_type))

        service = get_ingestion_service()
        result, replaced = service.add_images(payload)

        return ImageUploadResponse(
            images={pid: ref.url for pid, ref in result.images.items()},
            replaced=replaced,
            skipped=[SkippedFile(filename=name, reason=reason) for name, reason in result.skipped],
            total_images=len(service.state.images),
        )

    except Exception as e:
        return handle_error(e)
