"""
Product sheet schemas for validation and serialization.

Merged records and sheets are open mappings of field name to string value:
database columns are whatever the uploaded file carries, so only the
fields this service itself produces are named here.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum

from models.base import BaseSchema, RecordSchema, KeyedRecordsResponse, KeyedRecords


# Placeholder for any field whose source did not provide a value
NOT_AVAILABLE = "N/A"

# Fields read from garment labels, in display order
LABEL_FIELDS = ("color", "size", "drop", "kalip", "composition", "care", "barcode")
FULL_TEXT_FIELD = "fullText"

# Fields added to a merged record when it becomes a sheet
IMAGE_URL_FIELD = "imageUrl"
DESCRIPTION_FIELD = "description"
ID_FIELD = "id"


class Language(str, Enum):
    """Supported description locales."""
    EN = "en"
    TR = "tr"


class ExportFormat(str, Enum):
    """Download formats for the sheet collection."""
    JSON = "json"
    CSV = "csv"
    GOOGLE_SHEETS = "google-sheets"
    XLSX = "xlsx"


# ===================
# REQUESTS
# ===================

class LanguageRequest(BaseSchema):
    """
    Select the language used for generated descriptions.

    Checked against the supported locales by the route.
    """

    language: str = Field(..., max_length=10, description="Description locale", examples=["en"])


class MappingUpdate(RecordSchema):
    """
    Edit a single field of a merged record before generation.

    The value is stored as sent, surrounding whitespace included.
    """

    field: str = Field(..., min_length=1, max_length=100, examples=["color"])
    value: str = Field("", max_length=5000)

    @field_validator("field")
    @classmethod
    def field_name_not_blank(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("Field name must not be blank")
        return name


class SheetUpdate(RecordSchema):
    """
    Edit fields of a generated sheet.

    Only provided fields are changed; the sheet is persisted afterwards.
    Values are stored as sent, line breaks and surrounding whitespace
    included.
    """

    fields: dict[str, str] = Field(
        ...,
        min_length=1,
        description="Field name to new value",
        examples=[{"name": "Oxford Shirt", "color": "Navy"}]
    )

    @field_validator("fields")
    @classmethod
    def field_names_not_blank(cls, v: dict[str, str]) -> dict[str, str]:
        """Field names must be non-empty after trimming."""
        cleaned = {}
        for key, value in v.items():
            name = key.strip()
            if not name:
                raise ValueError("Field names must not be blank")
            cleaned[name] = value
        return cleaned


class GenerateRequest(BaseSchema):
    """Optional language override for a generation pass."""

    language: Optional[str] = Field(
        None,
        max_length=10,
        description="Locale for this pass (defaults to the session language)"
    )


# ===================
# RESPONSES
# ===================

class SkippedFile(BaseSchema):
    """A file that produced no data."""

    filename: str
    reason: str


class DatabaseUploadResponse(BaseSchema):
    """Result of a product database upload."""

    filename: str
    rows: int
    columns: list[str]
    skipped_rows: int = 0


class LabelUploadResponse(BaseSchema):
    """Result of a label upload batch."""

    extracted: list[str] = Field(default_factory=list, description="Identifiers extracted")
    skipped: list[SkippedFile] = Field(default_factory=list)
    total_labels: int = Field(..., description="Labels held after this upload")


class ImageUploadResponse(BaseSchema):
    """Result of an image upload batch."""

    images: dict[str, str] = Field(default_factory=dict, description="Identifier to image URL")
    replaced: list[str] = Field(default_factory=list)
    skipped: list[SkippedFile] = Field(default_factory=list)
    total_images: int


class IdentifierReportResponse(BaseSchema):
    """How identifiers line up across the three inputs."""

    matched: list[str]
    database_only: list[str]
    orphan_labels: list[str]
    orphan_images: list[str]


class SessionResponse(BaseSchema):
    """Snapshot of the pipeline state."""

    language: Language
    database_rows: int
    labels: int
    images: int
    mappings: int
    sheets: int
    identifiers: IdentifierReportResponse


class MappingListResponse(KeyedRecordsResponse):
    """Merged records keyed by identifier."""


class SheetListResponse(KeyedRecordsResponse):
    """Sheets keyed by identifier."""


class SheetError(BaseSchema):
    """Per-identifier failure during a generation pass."""

    product_id: str
    code: str
    message: str


class GenerationResponse(RecordSchema):
    """Result of generating or regenerating sheets."""

    language: Language
    generated: list[str]
    errors: list[SheetError] = Field(default_factory=list)
    data: KeyedRecords
