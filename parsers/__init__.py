"""
Upload parsers: product database files and garment labels.
"""

from parsers.tabular_parser import (
    parse_database,
    DatabaseParseResult,
)
from parsers.label_parser import (
    extract_label,
    parse_label_files,
    LabelParseResult,
)

__all__ = [
    "parse_database",
    "DatabaseParseResult",
    "extract_label",
    "parse_label_files",
    "LabelParseResult",
]
