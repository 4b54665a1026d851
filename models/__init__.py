"""
Pydantic models for validation and serialization, and the pipeline state.
"""

from models.base import BaseSchema
from models.product_sheet import (
    NOT_AVAILABLE,
    Language,
    ExportFormat,
    LanguageRequest,
    MappingUpdate,
    SheetUpdate,
    GenerateRequest,
    DatabaseUploadResponse,
    LabelUploadResponse,
    ImageUploadResponse,
    SessionResponse,
    MappingListResponse,
    SheetListResponse,
    GenerationResponse,
)
from models.pipeline import LabelRecord, ImageReference, PipelineState

__all__ = [
    "BaseSchema",
    "NOT_AVAILABLE",
    "Language",
    "ExportFormat",
    "LanguageRequest",
    "MappingUpdate",
    "SheetUpdate",
    "GenerateRequest",
    "DatabaseUploadResponse",
    "LabelUploadResponse",
    "ImageUploadResponse",
    "SessionResponse",
    "MappingListResponse",
    "SheetListResponse",
    "GenerationResponse",
    "LabelRecord",
    "ImageReference",
    "PipelineState",
]
