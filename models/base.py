"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict

# Merged records and sheets: field name to string value
FieldMap = dict[str, str]
KeyedRecords = dict[str, FieldMap]


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class RecordSchema(BaseModel):
    """
    Base for schemas carrying record values.

    Strings are returned untrimmed; label text keeps its line breaks.
    """
    model_config = ConfigDict(from_attributes=True)


class KeyedRecordsResponse(RecordSchema):
    """Records keyed by product identifier."""

    data: KeyedRecords
    total: int
