"""
Custom exception classes for the application.

Every error carries a code, a human-readable message and an HTTP status
so routes can return the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "SHEET_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# INPUT ERRORS
# ===================

class TabularParseError(ValidationError):
    """Product database file could not be parsed."""

    def __init__(
        self,
        message: str = "Error parsing database file.",
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_FILE_PARSE_ERROR",
            message=message,
            details=details
        )


class UploadTooLargeError(ValidationError):
    """Uploaded file exceeds the configured size limit."""

    def __init__(self, filename: str, max_bytes: int):
        super().__init__(
            code="UPLOAD_TOO_LARGE",
            message=f"File exceeds the {max_bytes // (1024 * 1024)} MB limit",
            details={"filename": filename, "max_bytes": max_bytes}
        )


class EmptyUploadError(ValidationError):
    """No usable file content was uploaded."""

    def __init__(self, filename: Optional[str] = None):
        super().__init__(
            code="EMPTY_UPLOAD",
            message="Uploaded file is empty",
            details={"filename": filename}
        )


# ===================
# PIPELINE ERRORS
# ===================

class MissingPrerequisiteError(ValidationError):
    """Operation invoked before the data it depends on was provided."""

    def __init__(self, message: str, missing: list[str]):
        super().__init__(
            code="MISSING_PREREQUISITE",
            message=message,
            details={"missing": missing}
        )


class UnsupportedLanguageError(ValidationError):
    """Language is not one of the supported locales."""

    def __init__(self, language: str, valid: list[str]):
        super().__init__(
            code="UNSUPPORTED_LANGUAGE",
            message=f"Language must be one of: {', '.join(valid)}",
            details={"provided": language, "valid": valid}
        )


class ImmutableFieldError(ValidationError):
    """Attempt to edit a field that is derived or acts as the key."""

    def __init__(self, field: str):
        super().__init__(
            code="IMMUTABLE_FIELD",
            message=f"Field '{field}' cannot be edited",
            details={"field": field}
        )


class ColorDerivationError(AppError):
    """Dominant color could not be computed from an image."""

    def __init__(self, product_id: str, message: str):
        super().__init__(
            code="COLOR_DERIVATION_FAILED",
            message=message,
            status_code=500,
            details={"product_id": product_id}
        )


class SheetPersistenceError(DatabaseError):
    """Product sheet could not be written to the store."""

    def __init__(self, product_id: str, message: str):
        super().__init__(
            operation="upsert",
            message=message,
            details={"product_id": product_id}
        )
        self.code = "SHEET_PERSIST_FAILED"


# ===================
# NOT FOUND
# ===================

class SheetNotFoundError(NotFoundError):
    """Product sheet not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product sheet",
            identifier=product_id,
            code="SHEET_NOT_FOUND"
        )


class MappingNotFoundError(NotFoundError):
    """Merged record not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Mapping",
            identifier=product_id,
            code="MAPPING_NOT_FOUND"
        )


class ImageNotFoundError(NotFoundError):
    """No image uploaded for the product."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Image",
            identifier=product_id,
            code="IMAGE_NOT_FOUND"
        )


# ===================
# EXPORT ERRORS
# ===================

class NoSheetsToExportError(ValidationError):
    """Export requested with an empty sheet collection."""

    def __init__(self):
        super().__init__(
            code="NO_SHEETS_TO_EXPORT",
            message="No product sheets to export."
        )


class UnsupportedExportFormatError(ValidationError):
    """Unknown export format."""

    def __init__(self, export_format: str, valid: list[str]):
        super().__init__(
            code="UNSUPPORTED_EXPORT_FORMAT",
            message=f"Format must be one of: {', '.join(valid)}",
            details={"provided": export_format, "valid": valid}
        )
