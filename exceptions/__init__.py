"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Input
    TabularParseError,
    UploadTooLargeError,
    EmptyUploadError,

    # Pipeline
    MissingPrerequisiteError,
    UnsupportedLanguageError,
    ImmutableFieldError,
    ColorDerivationError,
    SheetPersistenceError,

    # Not found
    SheetNotFoundError,
    MappingNotFoundError,
    ImageNotFoundError,

    # Export
    NoSheetsToExportError,
    UnsupportedExportFormatError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Input
    "TabularParseError",
    "UploadTooLargeError",
    "EmptyUploadError",

    # Pipeline
    "MissingPrerequisiteError",
    "UnsupportedLanguageError",
    "ImmutableFieldError",
    "ColorDerivationError",
    "SheetPersistenceError",

    # Not found
    "SheetNotFoundError",
    "MappingNotFoundError",
    "ImageNotFoundError",

    # Export
    "NoSheetsToExportError",
    "UnsupportedExportFormatError",
]
