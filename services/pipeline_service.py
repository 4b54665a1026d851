"""
Pipeline state transitions.

Each function takes a PipelineState and returns a new one; nothing is
mutated in place. PipelineSession holds the current state for the running
process (single user, single session).
"""

from dataclasses import replace
from threading import Lock
from types import MappingProxyType
from typing import Mapping, Optional, Sequence
import structlog

from config import settings
from models.pipeline import PipelineState, LabelRecord, ImageReference
from models.product_sheet import Language
from services.identifier_service import resolve_identifiers, IdentifierReport
from services.image_service import release_images

logger = structlog.get_logger(__name__)


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


def with_language(state: PipelineState, language: Language) -> PipelineState:
    return replace(state, language=language)


def with_database(state: PipelineState, rows: Sequence[dict[str, str]]) -> PipelineState:
    """Replace the database rows. Earlier mappings stay until the next auto map."""
    return replace(state, database=tuple(dict(row) for row in rows))


def with_labels(state: PipelineState, labels: Mapping[str, LabelRecord]) -> PipelineState:
    """Add labels; a label for an identifier already held replaces it."""
    return replace(state, labels=_frozen({**state.labels, **labels}))


def with_images(
    state: PipelineState,
    images: Mapping[str, ImageReference],
) -> tuple[PipelineState, list[str]]:
    """
    Add images; a new image for an identifier supersedes the old one.

    Returns:
        (new state, identifiers whose previous image was replaced)
    """
    superseded = [state.images[pid] for pid in images if pid in state.images]
    release_images(superseded)
    new_state = replace(state, images=_frozen({**state.images, **images}))
    return new_state, [ref.product_id for ref in superseded]


def with_merged(state: PipelineState, merged: Mapping[str, dict[str, str]]) -> PipelineState:
    return replace(state, merged=_frozen(merged))


def with_sheets(state: PipelineState, sheets: Mapping[str, dict[str, str]]) -> PipelineState:
    """Replace the whole sheet collection."""
    return replace(state, sheets=_frozen(sheets))


def with_sheet(state: PipelineState, product_id: str, sheet: dict[str, str]) -> PipelineState:
    """Insert or overwrite one sheet."""
    return replace(state, sheets=_frozen({**state.sheets, product_id: sheet}))


def identifier_report(state: PipelineState) -> IdentifierReport:
    return resolve_identifiers(state.database_ids, state.labels.keys(), state.images.keys())


class PipelineSession:
    """
    Current pipeline state for the process.

    Usage:
        session = get_pipeline_session()
        session.apply(with_language, Language.TR)
        state = session.state
    """

    def __init__(self, language: Optional[Language] = None):
        self._lock = Lock()
        self._state = PipelineState(language=language or Language(settings.default_language))

    @property
    def state(self) -> PipelineState:
        return self._state

    def apply(self, transition, *args, **kwargs) -> PipelineState:
        """Run a transition against the current state and keep the result."""
        with self._lock:
            self._state = transition(self._state, *args, **kwargs)
            return self._state

    def set(self, state: PipelineState) -> PipelineState:
        with self._lock:
            self._state = state
            return self._state

    def reset(self) -> None:
        """Drop everything, releasing held images."""
        with self._lock:
            released = release_images(self._state.images.values())
            self._state = PipelineState(language=self._state.language)
        logger.info("pipeline_session_reset", images_released=released)


# Singleton instance for convenience
_pipeline_session: Optional[PipelineSession] = None


def get_pipeline_session() -> PipelineSession:
    """Get or create the process-wide PipelineSession."""
    global _pipeline_session
    if _pipeline_session is None:
        _pipeline_session = PipelineSession()
    return _pipeline_session
