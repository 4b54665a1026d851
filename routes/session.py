"""
Session routes: language selection and pipeline overview.
"""

from fastapi import APIRouter
import structlog

from models.product_sheet import (
    LanguageRequest,
    SessionResponse,
    IdentifierReportResponse,
)
from routes.helpers import handle_error
from services.description_service import parse_language
from services.pipeline_service import (
    get_pipeline_session,
    with_language,
    identifier_report,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/session", tags=["Session"])


def _summary() -> SessionResponse:
    state = get_pipeline_session().state
    report = identifier_report(state)
    return SessionResponse(
        language=state.language,
        database_rows=len(state.database),
        labels=len(state.labels),
        images=len(state.images),
        mappings=len(state.merged),
        sheets=len(state.sheets),
        identifiers=IdentifierReportResponse(**report.to_dict()),
    )


@router.get("", response_model=SessionResponse)
async def get_session():
    """
    Current pipeline state.

    Counts per stage and how identifiers line up across the inputs.
    """
    try:
        return _summary()
    except Exception as e:
        return handle_error(e)


@router.put("/language", response_model=SessionResponse)
async def set_language(data: LanguageRequest):
    """
    Select the language for generated descriptions.

    Raises:
        422: Unsupported language
    """
    try:
        language = parse_language(data.language)
        get_pipeline_session().apply(with_language, language)
        logger.info("language_selected", language=language.value)
        return _summary()
    except Exception as e:
        return handle_error(e)


@router.delete("", status_code=204)
async def reset_session():
    """Discard uploads, mappings and in-memory sheets. Persisted sheets are kept."""
    try:
        get_pipeline_session().reset()
        return None
    except Exception as e:
        return handle_error(e)
