"""
Record merger.

Combines each database row with the label read from the same garment.
Label values win over spreadsheet values: they are read from the
physical product.
"""

from typing import Mapping, Sequence
import structlog

from exceptions import (
    MissingPrerequisiteError,
    MappingNotFoundError,
    ImmutableFieldError,
)
from models.pipeline import LabelRecord
from models.product_sheet import ID_FIELD

logger = structlog.get_logger(__name__)


def merge_records(
    database: Sequence[dict[str, str]],
    labels: Mapping[str, LabelRecord],
) -> dict[str, dict[str, str]]:
    """
    Build one merged record per database identifier.

    Args:
        database: Database rows in file order
        labels: Identifier to label record

    Returns:
        Identifier to merged record, in database order. Identifiers without
        a label keep only their database fields. Duplicate rows for one
        identifier: the later row wins.

    Raises:
        MissingPrerequisiteError: If there are no database rows or no labels
    """
    missing = []
    if not database:
        missing.append("database")
    if not labels:
        missing.append("labels")
    if missing:
        raise MissingPrerequisiteError(
            "Please upload database and labels first.",
            missing=missing
        )

    merged: dict[str, dict[str, str]] = {}
    overlaid = 0

    for row in database:
        product_id = row[ID_FIELD]
        record = dict(row)

        label = labels.get(product_id)
        if label is not None:
            record.update(label.to_fields())
            overlaid += 1

        merged[product_id] = record

    logger.info(
        "records_merged",
        total=len(merged),
        with_label=overlaid,
        database_only=len(merged) - overlaid
    )

    return merged


def update_mapping(
    merged: Mapping[str, dict[str, str]],
    product_id: str,
    field: str,
    value: str,
) -> dict[str, dict[str, str]]:
    """
    Edit one field of a merged record.

    Returns:
        New mapping with the edited record; the input is not modified

    Raises:
        MappingNotFoundError: If the identifier has no merged record
        ImmutableFieldError: If the field is the identifier
    """
    if product_id not in merged:
        raise MappingNotFoundError(product_id)
    if field == ID_FIELD:
        raise ImmutableFieldError(field)

    updated = {pid: dict(record) for pid, record in merged.items()}
    updated[product_id][field] = value

    logger.debug("mapping_updated", product_id=product_id, field=field)

    return updated
