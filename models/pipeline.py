"""
Pipeline state for one editing session.

The state moves through three owned stages: raw inputs (database rows,
labels, images), merged records, and sheets. Instances are immutable;
services/pipeline_service.py holds the transitions that produce new ones.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from models.product_sheet import Language, LABEL_FIELDS, FULL_TEXT_FIELD


@dataclass(frozen=True)
class LabelRecord:
    """Structured fields read from one garment label."""
    product_id: str
    color: str
    size: str
    drop: str
    kalip: str
    composition: str
    care: str
    barcode: str
    full_text: str

    def to_fields(self) -> dict[str, str]:
        """Fields overlaid onto the database row (identifier excluded)."""
        fields = {name: getattr(self, name) for name in LABEL_FIELDS}
        fields[FULL_TEXT_FIELD] = self.full_text
        return fields


@dataclass(frozen=True)
class ImageReference:
    """An uploaded product photo, addressable by identifier."""
    product_id: str
    filename: str
    content_type: str
    url: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


def _frozen(mapping: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class PipelineState:
    """
    Everything the session knows, stage by stage.

    Attributes:
        language: Locale for generated descriptions
        database: Rows of the product database, in file order
        labels: Identifier to label record
        images: Identifier to image reference
        merged: Identifier to merged record (database rows overlaid by labels)
        sheets: Identifier to product sheet
    """
    language: Language = Language.EN
    database: tuple[dict[str, str], ...] = ()
    labels: Mapping[str, LabelRecord] = field(default_factory=_frozen)
    images: Mapping[str, ImageReference] = field(default_factory=_frozen)
    merged: Mapping[str, dict[str, str]] = field(default_factory=_frozen)
    sheets: Mapping[str, dict[str, str]] = field(default_factory=_frozen)

    @property
    def database_ids(self) -> list[str]:
        return [row["id"] for row in self.database]
