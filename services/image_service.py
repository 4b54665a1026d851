"""
Product photo handling.

An uploaded photo is held in memory and served back under
/api/images/{id}. The identifier is the filename segment before the
first underscore. A later photo for the same identifier supersedes the
earlier one, which is released.
"""

import mimetypes
from dataclasses import dataclass, field
from typing import Iterable, Optional
from urllib.parse import quote
import structlog

from models.pipeline import ImageReference
from services.identifier_service import identifier_from_filename

logger = structlog.get_logger(__name__)

IMAGE_URL_PREFIX = "/api/images"


def image_url(product_id: str) -> str:
    """'JK100' → '/api/images/JK100'"""
    return f"{IMAGE_URL_PREFIX}/{quote(product_id, safe='')}"


@dataclass
class ImageIngestResult:
    """Images accepted from one upload batch."""
    images: dict[str, ImageReference] = field(default_factory=dict)
    skipped: list[tuple[str, str]] = field(default_factory=list)


def build_image_reference(
    filename: str,
    data: bytes,
    content_type: Optional[str] = None,
) -> Optional[ImageReference]:
    """
    ImageReference for an uploaded file.

    Returns:
        ImageReference, or None if the filename carries no identifier
    """
    product_id = identifier_from_filename(filename)
    if product_id is None:
        return None

    if not content_type or content_type == "application/octet-stream":
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

    return ImageReference(
        product_id=product_id,
        filename=filename,
        content_type=content_type,
        url=image_url(product_id),
        data=data,
    )


def ingest_images(files: Iterable[tuple[str, bytes, Optional[str]]]) -> ImageIngestResult:
    """
    Build references for a batch of uploaded photos.

    Args:
        files: (filename, content, content type) triples

    Returns:
        ImageIngestResult; within the batch a later file for the same
        identifier wins
    """
    result = ImageIngestResult()

    for filename, data, content_type in files:
        if not data:
            result.skipped.append((filename, "File is empty"))
            continue

        reference = build_image_reference(filename, data, content_type)
        if reference is None:
            logger.warning("image_identifier_missing", filename=filename)
            result.skipped.append((filename, "Could not derive product ID from filename"))
            continue

        if not reference.content_type.startswith("image/"):
            result.skipped.append((filename, "File is not an image"))
            continue

        previous = result.images.get(reference.product_id)
        if previous is not None:
            release_images([previous])
        result.images[reference.product_id] = reference

    logger.info("images_ingested", accepted=len(result.images), skipped=len(result.skipped))

    return result


def release_images(references: Iterable[ImageReference]) -> int:
    """
    Log photos leaving the session.

    Only records the release. The photo bytes are freed once the session
    state no longer references them, which the callers ensure by replacing
    or discarding the images mapping.

    Returns:
        Number of images logged
    """
    released = 0
    for reference in references:
        logger.debug(
            "image_released",
            product_id=reference.product_id,
            filename=reference.filename
        )
        released += 1
    return released
