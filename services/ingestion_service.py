"""
Ingestion service: uploads and mapping.

Applies parsed uploads to the pipeline session and builds the merged
records. A failed database parse leaves the session untouched; label and
image batches accumulate across uploads.
"""

from typing import Iterable, Optional
import structlog

from config import settings
from exceptions import MappingNotFoundError
from models.pipeline import PipelineState
from parsers.label_parser import parse_label_files, LabelParseResult
from parsers.tabular_parser import parse_database, DatabaseParseResult
from services.image_service import ingest_images, ImageIngestResult
from services.merge_service import merge_records, update_mapping
from services.pipeline_service import (
    PipelineSession,
    get_pipeline_session,
    with_database,
    with_labels,
    with_images,
    with_merged,
)

logger = structlog.get_logger(__name__)


class IngestionService:
    """
    Upload handling for the three input sets.

    Usage:
        service = get_ingestion_service()
        service.load_database(content, "products.csv")
        service.add_labels([("JK100.txt", raw)])
        merged = service.auto_map()
    """

    def __init__(
        self,
        session: Optional[PipelineSession] = None,
        label_prefix: Optional[str] = None,
    ):
        self.session = session or get_pipeline_session()
        self.label_prefix = label_prefix or settings.label_id_prefix

    @property
    def state(self) -> PipelineState:
        return self.session.state

    # ===================
    # UPLOADS
    # ===================

    def load_database(self, content: bytes, filename: Optional[str]) -> DatabaseParseResult:
        """
        Replace the product database with a parsed upload.

        Raises:
            TabularParseError: If the file cannot be parsed (session unchanged)
        """
        result = parse_database(content, filename)
        self.session.apply(with_database, result.rows)

        logger.info("database_loaded", filename=filename, rows=len(result.rows))
        return result

    def add_labels(self, files: Iterable[tuple[str, bytes]]) -> LabelParseResult:
        """Extract and add label files; unreadable labels are reported, not raised."""
        result = parse_label_files(files, prefix=self.label_prefix)
        if result.labels:
            self.session.apply(with_labels, result.labels)

        logger.info(
            "labels_added",
            extracted=len(result.labels),
            skipped=len(result.skipped),
            total=len(self.state.labels)
        )
        return result

    def add_images(
        self,
        files: Iterable[tuple[str, bytes, Optional[str]]],
    ) -> tuple[ImageIngestResult, list[str]]:
        """
        Add product photos.

        Returns:
            (ingest result, identifiers whose earlier photo was replaced)
        """
        result = ingest_images(files)
        replaced: list[str] = []
        if result.images:
            state, replaced = with_images(self.state, result.images)
            self.session.set(state)

        logger.info(
            "images_added",
            accepted=len(result.images),
            replaced=len(replaced),
            total=len(self.state.images)
        )
        return result, replaced

    # ===================
    # MAPPING
    # ===================

    def auto_map(self) -> dict[str, dict[str, str]]:
        """
        Merge database rows with labels.

        Raises:
            MissingPrerequisiteError: If database or labels are missing
                (session unchanged)
        """
        state = self.state
        merged = merge_records(state.database, state.labels)
        self.session.apply(with_merged, merged)
        return merged

    def update_mapping(self, product_id: str, field: str, value: str) -> dict[str, str]:
        """
        Edit one merged field.

        Raises:
            MappingNotFoundError: If the identifier has no merged record
            ImmutableFieldError: If the field is the identifier
        """
        merged = update_mapping(self.state.merged, product_id, field, value)
        self.session.apply(with_merged, merged)
        return merged[product_id]

    def get_mapping(self, product_id: str) -> dict[str, str]:
        record = self.state.merged.get(product_id)
        if record is None:
            raise MappingNotFoundError(product_id)
        return dict(record)


def get_ingestion_service() -> IngestionService:
    """IngestionService bound to the process session."""
    return IngestionService()
