"""
Sheet synthesis.

For each merged record: resolve the photo, derive the dominant color,
render the description, assemble the sheet and persist it. Identifiers
are processed one after another and independently; a failed write is
reported and the remaining identifiers still run. The in-memory sheet is
kept whatever the outcome of the write.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional
import structlog

from exceptions import (
    AppError,
    MissingPrerequisiteError,
    SheetNotFoundError,
    ImmutableFieldError,
)
from models.pipeline import PipelineState, ImageReference
from models.product_sheet import (
    Language,
    ID_FIELD,
    IMAGE_URL_FIELD,
    DESCRIPTION_FIELD,
)
from services.color_service import ColorService, get_color_service
from services.description_service import DescriptionService, get_description_service
from services.pipeline_service import (
    PipelineSession,
    get_pipeline_session,
    with_sheets,
    with_sheet,
)
from services.sheet_store import SheetStore, get_sheet_store

logger = structlog.get_logger(__name__)

# Computed on every (re)generation; never taken from an edit
DERIVED_FIELDS = (IMAGE_URL_FIELD, DESCRIPTION_FIELD)


@dataclass
class SheetFailure:
    """A sheet that could not be built or persisted."""
    product_id: str
    code: str
    message: str


@dataclass
class GenerationReport:
    """Outcome of a generation pass."""
    language: Language
    sheets: dict[str, dict[str, str]] = field(default_factory=dict)
    errors: list[SheetFailure] = field(default_factory=list)

    @property
    def generated(self) -> list[str]:
        return list(self.sheets.keys())

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


def build_sheet(
    record: Mapping[str, str],
    image: Optional[ImageReference],
    language: Language,
    color_service: ColorService,
    description_service: DescriptionService,
) -> dict[str, str]:
    """
    Assemble one product sheet.

    Color is derived before the description is rendered, since the
    description shows it.
    """
    dominant_color = color_service.derive(image)
    description = description_service.generate(record, language, dominant_color)

    sheet = dict(record)
    sheet[IMAGE_URL_FIELD] = image.url if image else ""
    sheet[DESCRIPTION_FIELD] = description
    return sheet


class SheetService:
    """
    Generate, regenerate, edit and load product sheets.

    Usage:
        service = get_sheet_service()
        report = service.generate_all()
        sheet, failure = service.regenerate("JK100")
    """

    def __init__(
        self,
        session: Optional[PipelineSession] = None,
        store: Optional[SheetStore] = None,
        color_service: Optional[ColorService] = None,
        description_service: Optional[DescriptionService] = None,
    ):
        self.session = session or get_pipeline_session()
        self.store = store or get_sheet_store()
        self.color_service = color_service or get_color_service()
        self.description_service = description_service or get_description_service()

    @property
    def state(self) -> PipelineState:
        return self.session.state

    # ===================
    # GENERATION
    # ===================

    def generate_all(self, language: Optional[Language] = None) -> GenerationReport:
        """
        Build a sheet for every merged record.

        The fresh batch replaces the sheets held in memory. An identifier
        whose sheet cannot be built or persisted is listed in the report
        errors; the others still run.

        Raises:
            MissingPrerequisiteError: If nothing has been mapped yet
        """
        state = self.state
        if not state.merged:
            raise MissingPrerequisiteError("Please map the data first.", missing=["mappings"])

        language = language or state.language
        report = GenerationReport(language=language)

        logger.info("generating_sheets", count=len(state.merged), language=language.value)

        for product_id, record in state.merged.items():
            try:
                sheet = build_sheet(
                    record,
                    state.images.get(product_id),
                    language,
                    self.color_service,
                    self.description_service,
                )
            except Exception as e:
                logger.error(
                    "sheet_build_failed",
                    product_id=product_id,
                    error=str(e),
                    error_type=type(e).__name__
                )
                report.errors.append(SheetFailure(
                    product_id=product_id,
                    code="SHEET_BUILD_FAILED",
                    message=str(e),
                ))
                continue

            report.sheets[product_id] = sheet

            failure = self._persist(product_id, sheet)
            if failure:
                report.errors.append(failure)

        self.session.apply(with_sheets, report.sheets)

        logger.info(
            "sheets_generated",
            generated=len(report.sheets),
            errors=len(report.errors)
        )

        return report

    def regenerate(
        self,
        product_id: str,
        language: Optional[Language] = None,
    ) -> tuple[dict[str, str], Optional[SheetFailure]]:
        """
        Rebuild image URL and description for one identifier.

        Edited sheet fields are kept; only the derived fields are recomputed.

        Returns:
            (sheet, persistence failure or None)

        Raises:
            SheetNotFoundError: If the identifier has neither a mapping nor a sheet
        """
        state = self.state
        record = self._regeneration_record(state, product_id)
        language = language or state.language

        logger.info("regenerating_sheet", product_id=product_id, language=language.value)

        sheet = build_sheet(
            record,
            state.images.get(product_id),
            language,
            self.color_service,
            self.description_service,
        )
        self.session.apply(with_sheet, product_id, sheet)

        return sheet, self._persist(product_id, sheet)

    # ===================
    # REVIEW / EDIT
    # ===================

    def get_sheet(self, product_id: str) -> dict[str, str]:
        sheet = self.state.sheets.get(product_id)
        if sheet is None:
            raise SheetNotFoundError(product_id)
        return dict(sheet)

    def get_all(self) -> dict[str, dict[str, str]]:
        return {pid: dict(sheet) for pid, sheet in self.state.sheets.items()}

    def update_sheet(
        self,
        product_id: str,
        changes: Mapping[str, str],
    ) -> tuple[dict[str, str], Optional[SheetFailure]]:
        """
        Edit fields of an existing sheet and persist it.

        The description may be edited directly; the identifier may not.

        Raises:
            SheetNotFoundError: If there is no sheet for the identifier
            ImmutableFieldError: If the identifier field is in the changes
        """
        sheet = self.get_sheet(product_id)
        if ID_FIELD in changes and changes[ID_FIELD] != product_id:
            raise ImmutableFieldError(ID_FIELD)

        sheet.update(changes)
        self.session.apply(with_sheet, product_id, sheet)

        logger.info("sheet_updated", product_id=product_id, fields=list(changes.keys()))

        return sheet, self._persist(product_id, sheet)

    def load_sheets(self) -> dict[str, dict[str, str]]:
        """
        Replace the sheets in memory with everything persisted.

        Raises:
            DatabaseError: If the store cannot be read (memory unchanged)
        """
        sheets = self.store.get_all()
        self.session.apply(with_sheets, sheets)
        return sheets

    # ===================
    # HELPERS
    # ===================

    def _regeneration_record(self, state: PipelineState, product_id: str) -> dict[str, str]:
        merged = state.merged.get(product_id)
        sheet = state.sheets.get(product_id)
        if merged is None and sheet is None:
            raise SheetNotFoundError(product_id)

        record = dict(merged or {})
        if sheet is not None:
            record.update({k: v for k, v in sheet.items() if k not in DERIVED_FIELDS})
        if merged is not None and DESCRIPTION_FIELD in merged:
            # The sheet's description is generated text; render from the source one
            record[DESCRIPTION_FIELD] = merged[DESCRIPTION_FIELD]
        return record

    def _persist(self, product_id: str, sheet: dict[str, str]) -> Optional[SheetFailure]:
        try:
            self.store.put(product_id, sheet)
            return None
        except AppError as e:
            return SheetFailure(product_id=product_id, code=e.code, message=e.message)


def get_sheet_service() -> SheetService:
    """SheetService bound to the process session and configured services."""
    return SheetService()
