"""
Business logic services.

Each service handles one stage of the sheet pipeline.
"""

from services.pipeline_service import PipelineSession, get_pipeline_session
from services.ingestion_service import IngestionService, get_ingestion_service
from services.color_service import ColorService, get_color_service
from services.description_service import DescriptionService, get_description_service
from services.sheet_store import SheetStore, get_sheet_store
from services.sheet_service import SheetService, get_sheet_service
from services.export_service import ExportService, get_export_service

__all__ = [
    "PipelineSession",
    "get_pipeline_session",
    "IngestionService",
    "get_ingestion_service",
    "ColorService",
    "get_color_service",
    "DescriptionService",
    "get_description_service",
    "SheetStore",
    "get_sheet_store",
    "SheetService",
    "get_sheet_service",
    "ExportService",
    "get_export_service",
]
