"""
Export service: serialize the product sheet collection.

Formats:
    json           Document keyed by identifier, field names preserved
    csv            One row per sheet, header = union of field names
    google-sheets  Same rows without header, for pasting into a spreadsheet
    xlsx           One worksheet with header row
"""

import json
from dataclasses import dataclass
from io import BytesIO
from typing import Mapping, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side
import structlog

from exceptions import NoSheetsToExportError, UnsupportedExportFormatError
from models.product_sheet import ExportFormat

logger = structlog.get_logger(__name__)

# Excel caps a cell at 32,767 characters
XLSX_CELL_LIMIT = 32767


@dataclass(frozen=True)
class ExportFile:
    """A rendered export ready for download."""
    content: bytes
    filename: str
    media_type: str


def column_order(sheets: Mapping[str, Mapping[str, str]]) -> list[str]:
    """Union of field names in first-seen order."""
    columns: dict[str, None] = {}
    for sheet in sheets.values():
        for name in sheet.keys():
            columns.setdefault(name, None)
    return list(columns)


class ExportService:
    """Service for rendering sheet exports. Never modifies the sheets."""

    def to_json(self, sheets: Mapping[str, Mapping[str, str]]) -> str:
        """Sheets as a JSON document keyed by identifier."""
        return json.dumps(
            {pid: dict(sheet) for pid, sheet in sheets.items()},
            indent=2,
            ensure_ascii=False,
        )

    def from_json(self, text: str) -> dict[str, dict[str, str]]:
        """Rebuild sheets from a JSON export."""
        data = json.loads(text)
        return {pid: dict(sheet) for pid, sheet in data.items()}

    def to_csv(self, sheets: Mapping[str, Mapping[str, str]]) -> str:
        """
        One row per sheet with a header row.

        A sheet lacking a column gets an empty cell.
        """
        df = pd.DataFrame(
            [dict(sheet) for sheet in sheets.values()],
            columns=column_order(sheets),
        )
        return df.to_csv(index=False, na_rep="")

    def to_sheets_csv(self, sheets: Mapping[str, Mapping[str, str]]) -> str:
        """
        Value-only rows without header.

        Each row lists its own sheet's values in that sheet's key order.
        """
        df = pd.DataFrame([list(sheet.values()) for sheet in sheets.values()])
        return df.to_csv(index=False, header=False, na_rep="")

    def to_xlsx(self, sheets: Mapping[str, Mapping[str, str]]) -> BytesIO:
        """
        Single worksheet with a bold header row.

        Returns:
            BytesIO containing the Excel file
        """
        columns = column_order(sheets)

        wb = Workbook()
        ws = wb.active
        ws.title = "Product Sheets"

        bold_font = Font(bold=True)
        thin_border = Border(bottom=Side(style="thin", color="000000"))

        for col, name in enumerate(columns, start=1):
            cell = ws.cell(row=1, column=col, value=name)
            cell.font = bold_font
            cell.border = thin_border

        for row, sheet in enumerate(sheets.values(), start=2):
            for col, name in enumerate(columns, start=1):
                value = sheet.get(name, "")
                ws.cell(row=row, column=col, value=str(value)[:XLSX_CELL_LIMIT])

        ws.freeze_panes = "A2"

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output

    def render(
        self,
        sheets: Mapping[str, Mapping[str, str]],
        export_format: str,
    ) -> ExportFile:
        """
        Render sheets in the requested format.

        Raises:
            NoSheetsToExportError: If there are no sheets
            UnsupportedExportFormatError: If the format is unknown
        """
        try:
            fmt = ExportFormat(export_format)
        except ValueError:
            raise UnsupportedExportFormatError(export_format, [f.value for f in ExportFormat])

        if not sheets:
            raise NoSheetsToExportError()

        logger.info("exporting_sheets", format=fmt.value, count=len(sheets))

        if fmt == ExportFormat.JSON:
            return ExportFile(
                content=self.to_json(sheets).encode("utf-8"),
                filename="product_sheets.json",
                media_type="application/json",
            )
        if fmt == ExportFormat.CSV:
            return ExportFile(
                content=self.to_csv(sheets).encode("utf-8"),
                filename="product_sheets.csv",
                media_type="text/csv",
            )
        if fmt == ExportFormat.GOOGLE_SHEETS:
            return ExportFile(
                content=self.to_sheets_csv(sheets).encode("utf-8"),
                filename="product_sheets.csv",
                media_type="text/csv",
            )
        return ExportFile(
            content=self.to_xlsx(sheets).getvalue(),
            filename="product_sheets.xlsx",
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
