"""
Identifier registry.

The product identifier is the join key across the database rows, the
label records and the image files. Database identifiers drive which
sheets exist; labels and images without a database row are kept but
reported as orphans.
"""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Iterable, Optional
import structlog

logger = structlog.get_logger(__name__)


def canonical_identifier(value: Optional[str]) -> Optional[str]:
    """
    Canonical form of an identifier.

    - "  JK100 " → "JK100"
    - "" / None → None

    Identifiers are case-sensitive; labels and filenames carry the same
    printed code as the database.
    """
    if value is None:
        return None
    value = value.strip()
    return value or None


def identifier_from_filename(filename: str) -> Optional[str]:
    """
    Identifier encoded in an image filename.

    - "JK100_front.jpg" → "JK100"
    - "JK100_back_2.png" → "JK100"
    - "JK100.jpg" → "JK100"
    - "_front.jpg" → None
    """
    name = PurePath(filename).name
    if "_" in name:
        prefix = name.split("_", 1)[0]
    else:
        prefix = PurePath(name).stem
    return canonical_identifier(prefix)


@dataclass
class IdentifierReport:
    """How identifiers from the three inputs line up."""
    matched: list[str] = field(default_factory=list)
    database_only: list[str] = field(default_factory=list)
    orphan_labels: list[str] = field(default_factory=list)
    orphan_images: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "matched": self.matched,
            "database_only": self.database_only,
            "orphan_labels": self.orphan_labels,
            "orphan_images": self.orphan_images,
        }


def resolve_identifiers(
    database_ids: Iterable[str],
    label_ids: Iterable[str],
    image_ids: Iterable[str],
) -> IdentifierReport:
    """
    Compare identifier sets.

    Args:
        database_ids: Identifiers of database rows, in file order
        label_ids: Identifiers of extracted labels
        image_ids: Identifiers of uploaded images

    Returns:
        IdentifierReport; `matched` lists database identifiers that have a
        label, `database_only` those that have none
    """
    database_ids = list(dict.fromkeys(database_ids))
    database_set = set(database_ids)
    label_set = set(label_ids)

    report = IdentifierReport(
        matched=[pid for pid in database_ids if pid in label_set],
        database_only=[pid for pid in database_ids if pid not in label_set],
        orphan_labels=sorted(label_set - database_set),
        orphan_images=sorted(set(image_ids) - database_set),
    )

    if report.orphan_labels or report.orphan_images:
        logger.info(
            "orphan_identifiers",
            labels=report.orphan_labels,
            images=report.orphan_images
        )

    return report
