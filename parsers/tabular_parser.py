"""
Product database parser.

Reads the spreadsheet export of the product database (CSV or XLSX) into
flat rows of field name to string value. Every row must carry an `id`.
"""

import csv
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import PurePath
from typing import Optional
import structlog

import pandas as pd

from exceptions import TabularParseError
from models.product_sheet import ID_FIELD
from utils.text_utils import clean_cell

logger = structlog.get_logger(__name__)

CSV_DELIMITERS = ",;\t"
SNIFF_SAMPLE_BYTES = 64 * 1024

CSV_EXTENSIONS = {".csv", ".txt", ".tsv"}
EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}


@dataclass
class DatabaseParseResult:
    """Rows parsed from the product database file."""
    rows: list[dict[str, str]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    skipped_rows: list[int] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return len(self.rows) > 0


def parse_database(content: bytes, filename: Optional[str] = None) -> DatabaseParseResult:
    """
    Parse an uploaded product database.

    Args:
        content: File content
        filename: Original filename; the extension selects CSV or Excel

    Returns:
        DatabaseParseResult with rows in file order

    Raises:
        TabularParseError: If the file cannot be read, has no `id` column,
            or holds no rows. Nothing is returned in that case.
    """
    extension = PurePath(filename or "").suffix.lower()
    logger.info("parsing_database", filename=filename, extension=extension)

    try:
        if extension in EXCEL_EXTENSIONS:
            df = pd.read_excel(BytesIO(content), dtype=str, engine="openpyxl")
        else:
            df = pd.read_csv(
                BytesIO(content),
                sep=sniff_delimiter(content),
                engine="python",
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8-sig",
            )
    except Exception as e:
        logger.error("database_read_failed", filename=filename, error=str(e))
        raise TabularParseError(details={"filename": filename, "original_error": str(e)})

    df.columns = [_normalize_column(col) for col in df.columns]

    if ID_FIELD not in df.columns:
        logger.error("database_missing_id_column", filename=filename, columns=list(df.columns))
        raise TabularParseError(
            message="Database file must have an 'id' column.",
            details={"filename": filename, "columns": list(df.columns)}
        )

    result = DatabaseParseResult(columns=list(df.columns))

    for idx, raw in enumerate(df.to_dict(orient="records")):
        row_num = idx + 2  # 1-indexed + header
        row = {column: clean_cell(value) for column, value in raw.items()}

        # Trailing blank lines
        if not any(row.values()):
            continue

        if not row[ID_FIELD]:
            logger.warning("database_row_missing_id", row=row_num)
            result.skipped_rows.append(row_num)
            continue

        result.rows.append(row)

    if not result.has_data:
        raise TabularParseError(
            message="Database file has no product rows.",
            details={"filename": filename, "skipped_rows": result.skipped_rows}
        )

    logger.info(
        "database_parsed",
        rows=len(result.rows),
        columns=len(result.columns),
        skipped=len(result.skipped_rows)
    )

    return result


def _normalize_column(col: object) -> str:
    """Trim header names; any casing of 'id' becomes the join key column."""
    name = str(col).strip()
    if name.lower() == ID_FIELD:
        return ID_FIELD
    return name


def sniff_delimiter(content: bytes) -> str:
    """
    Delimiter of a CSV export: comma, semicolon or tab.

    - b"id;name\\nJK1;Shirt" → ";"
    - b"id\\nJK1" → "," (single column)
    """
    sample = content[:SNIFF_SAMPLE_BYTES].decode("utf-8-sig", errors="ignore")
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","
