"""
Garment label parser.

Labels are printed with inconsistent layouts, so each field has its own
named rule applied to the whole text. A rule that does not match yields
the "N/A" placeholder; only a missing product identifier drops the label.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional
import structlog

from models.pipeline import LabelRecord
from models.product_sheet import NOT_AVAILABLE
from utils.text_utils import decode_label_bytes

logger = structlog.get_logger(__name__)

DEFAULT_ID_PREFIX = "JK"


@dataclass(frozen=True)
class ExtractionRule:
    """A labeled line on the garment label, e.g. 'Beden/Size: M'."""
    name: str
    pattern: re.Pattern

    def apply(self, text: str) -> Optional[str]:
        """Return the trimmed first capture, or None when the line is absent."""
        match = self.pattern.search(text)
        if not match:
            return None
        return match.group(1).strip()


# Bilingual (Turkish/English) captions as printed on labels; captures stop at end of line
FIELD_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("color", re.compile(r"Renk/Color:[ \t]*([\w \t]+)")),
    ExtractionRule("size", re.compile(r"Beden/Size:[ \t]*([\w \t/]+)")),
    ExtractionRule("drop", re.compile(r"Drop:[ \t]*([\w \t]+)")),
    ExtractionRule("kalip", re.compile(r"Kal[iı]p:[ \t]*([\w \t]+)")),
    ExtractionRule("composition", re.compile(r"Material Composition:[ \t]*([\w \t%]+)")),
    ExtractionRule("care", re.compile(r"Care Instructions:[ \t]*(.+)")),
    ExtractionRule("barcode", re.compile(r"Barcode:[ \t]*(\d+)")),
)


def identifier_pattern(prefix: str = DEFAULT_ID_PREFIX) -> re.Pattern:
    """Prefix followed by a word token: 'JK100', 'JK2024A'."""
    return re.compile(re.escape(prefix) + r"(\w+)")


def extract_label(
    text: str,
    prefix: str = DEFAULT_ID_PREFIX,
    source: Optional[str] = None,
) -> Optional[LabelRecord]:
    """
    Parse one label text into a LabelRecord.

    Args:
        text: Full label text
        prefix: Identifier prefix printed on labels
        source: Filename, for diagnostics only

    Returns:
        LabelRecord, or None if no product identifier is found
    """
    id_match = identifier_pattern(prefix).search(text)
    if not id_match:
        logger.warning(
            "label_identifier_missing",
            source=source,
            preview=text[:80]
        )
        return None

    product_id = f"{prefix}{id_match.group(1)}"
    values = {}
    for rule in FIELD_RULES:
        value = rule.apply(text)
        values[rule.name] = value if value else NOT_AVAILABLE

    missing = [name for name, value in values.items() if value == NOT_AVAILABLE]
    logger.debug(
        "label_extracted",
        product_id=product_id,
        source=source,
        missing_fields=missing
    )

    return LabelRecord(product_id=product_id, full_text=text, **values)


@dataclass
class LabelParseResult:
    """Result of parsing a batch of label files."""
    labels: dict[str, LabelRecord] = field(default_factory=dict)
    skipped: list[tuple[str, str]] = field(default_factory=list)

    @property
    def extracted_ids(self) -> list[str]:
        return list(self.labels.keys())


def parse_label_files(
    files: Iterable[tuple[str, bytes]],
    prefix: str = DEFAULT_ID_PREFIX,
) -> LabelParseResult:
    """
    Parse uploaded label files independently.

    A file that cannot be decoded or carries no identifier is skipped and
    reported; it never stops the rest of the batch. Two labels with the
    same identifier: the later one wins.

    Args:
        files: (filename, raw bytes) pairs
        prefix: Identifier prefix printed on labels

    Returns:
        LabelParseResult with labels by identifier and skipped files
    """
    result = LabelParseResult()

    for filename, raw in files:
        try:
            text = decode_label_bytes(raw)
        except UnicodeDecodeError as e:
            logger.warning("label_decode_failed", source=filename, error=str(e))
            result.skipped.append((filename, "File is not readable text"))
            continue

        record = extract_label(text, prefix=prefix, source=filename)
        if record is None:
            result.skipped.append((filename, "Could not extract product ID from label"))
            continue

        if record.product_id in result.labels:
            logger.info("label_replaced_in_batch", product_id=record.product_id, source=filename)
        result.labels[record.product_id] = record

    logger.info(
        "labels_parsed",
        extracted=len(result.labels),
        skipped=len(result.skipped)
    )

    return result
