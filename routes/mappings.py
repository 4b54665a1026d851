"""
Mapping routes: merge database rows with labels and review the result.
"""

from fastapi import APIRouter
import structlog

from models.product_sheet import MappingListResponse, MappingUpdate
from routes.helpers import handle_error
from services.ingestion_service import get_ingestion_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/mappings", tags=["Mappings"])


@router.post("/auto", response_model=MappingListResponse)
async def auto_map():
    """
    Merge every database row with the label of the same product ID.

    Label values override database values of the same field.

    Raises:
        422: Database or labels not uploaded yet
    """
    try:
        merged = get_ingestion_service().auto_map()
        return MappingListResponse(data=merged, total=len(merged))
    except Exception as e:
        return handle_error(e)


@router.get("", response_model=MappingListResponse)
async def list_mappings():
    """Merged records keyed by product ID."""
    try:
        merged = {pid: dict(r) for pid, r in get_ingestion_service().state.merged.items()}
        return MappingListResponse(data=merged, total=len(merged))
    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=dict[str, str])
async def get_mapping(product_id: str):
    """
    One merged record.

    Raises:
        404: No mapping for the product ID
    """
    try:
        return get_ingestion_service().get_mapping(product_id)
    except Exception as e:
        return handle_error(e)


@router.patch("/{product_id}", response_model=dict[str, str])
async def update_mapping(product_id: str, data: MappingUpdate):
    """
    Edit one field of a merged record before sheets are generated.

    Raises:
        404: No mapping for the product ID
        422: Field is the product ID
    """
    try:
        return get_ingestion_service().update_mapping(product_id, data.field, data.value)
    except Exception as e:
        return handle_error(e)
