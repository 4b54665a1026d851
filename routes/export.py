"""
Export routes: download the sheet collection.
"""

from fastapi import APIRouter, Response
import structlog

from routes.helpers import handle_error
from services.export_service import get_export_service
from services.sheet_service import get_sheet_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/export", tags=["Export"])


@router.get("/{export_format}")
async def export_sheets(export_format: str):
    """
    Download all sheets of the session.

    Formats: json, csv, google-sheets (CSV without header), xlsx.

    Raises:
        422: No sheets, or unknown format
    """
    try:
        sheets = get_sheet_service().get_all()
        export = get_export_service().render(sheets, export_format)

        return Response(
            content=export.content,
            media_type=export.media_type,
            headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
        )

    except Exception as e:
        return handle_error(e)
