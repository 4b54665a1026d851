"""
Serve uploaded product photos.
"""

from fastapi import APIRouter, Response

from exceptions import ImageNotFoundError
from routes.helpers import handle_error
from services.pipeline_service import get_pipeline_session

router = APIRouter(prefix="/api/images", tags=["Images"])


@router.get("/{product_id}")
async def get_image(product_id: str):
    """
    Photo bytes for a product.

    Raises:
        404: No photo uploaded for the product in this session
    """
    try:
        image = get_pipeline_session().state.images.get(product_id)
        if image is None:
            raise ImageNotFoundError(product_id)
        return Response(content=image.data, media_type=image.content_type)
    except Exception as e:
        return handle_error(e)
