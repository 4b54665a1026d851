"""
Product sheet routes: generate, review, modify, regenerate, load.
"""

from typing import Optional

from fastapi import APIRouter, Query
import structlog

from models.product_sheet import (
    GenerateRequest,
    GenerationResponse,
    SheetError,
    SheetListResponse,
    SheetUpdate,
)
from routes.helpers import handle_error
from services.description_service import parse_language
from services.sheet_service import get_sheet_service, SheetFailure

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/sheets", tags=["Sheets"])


def _errors(failures: list[SheetFailure]) -> list[SheetError]:
    return [
        SheetError(product_id=f.product_id, code=f.code, message=f.message)
        for f in failures
    ]


@router.post("/generate", response_model=GenerationResponse)
async def generate_sheets(data: Optional[GenerateRequest] = None):
    """
    Generate a sheet for every mapped product.

    Sheets that could not be saved are listed in `errors` but are still
    returned and kept for this session.

    Raises:
        422: Nothing mapped yet, or unsupported language
    """
    try:
        language = parse_language(data.language) if data and data.language else None
        service = get_sheet_service()
        report = service.generate_all(language=language)
        return GenerationResponse(
            language=report.language,
            generated=report.generated,
            errors=_errors(report.errors),
            data=report.sheets,
        )
    except Exception as e:
        return handle_error(e)


@router.post("/load", response_model=SheetListResponse)
async def load_sheets():
    """
    Replace the session's sheets with every saved sheet.

    Raises:
        500: Store unavailable
    """
    try:
        sheets = get_sheet_service().load_sheets()
        return SheetListResponse(data=sheets, total=len(sheets))
    except Exception as e:
        return handle_error(e)


@router.get("", response_model=SheetListResponse)
async def list_sheets():
    """Sheets of this session keyed by product ID."""
    try:
        sheets = get_sheet_service().get_all()
        return SheetListResponse(data=sheets, total=len(sheets))
    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=dict[str, str])
async def get_sheet(product_id: str):
    """
    Review one sheet.

    Raises:
        404: No sheet for the product ID
    """
    try:
        return get_sheet_service().get_sheet(product_id)
    except Exception as e:
        return handle_error(e)


@router.patch("/{product_id}", response_model=GenerationResponse)
async def update_sheet(product_id: str, data: SheetUpdate):
    """
    Modify fields of a sheet.

    Raises:
        404: No sheet for the product ID
        422: Attempt to change the product ID
    """
    try:
        service = get_sheet_service()
        sheet, failure = service.update_sheet(product_id, data.fields)
        return GenerationResponse(
            language=service.state.language,
            generated=[product_id],
            errors=_errors([failure] if failure else []),
            data={product_id: sheet},
        )
    except Exception as e:
        return handle_error(e)


@router.post("/{product_id}/regenerate", response_model=GenerationResponse)
async def regenerate_sheet(
    product_id: str,
    language: Optional[str] = Query(None, description="Locale (defaults to the session language)"),
):
    """
    Recompute image and description of one sheet.

    Raises:
        404: Product ID neither mapped nor generated
        422: Unsupported language
    """
    try:
        locale = parse_language(language) if language else None
        service = get_sheet_service()
        sheet, failure = service.regenerate(product_id, language=locale)
        return GenerationResponse(
            language=locale or service.state.language,
            generated=[product_id],
            errors=_errors([failure] if failure else []),
            data={product_id: sheet},
        )
    except Exception as e:
        return handle_error(e)
