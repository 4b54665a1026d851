"""
API route modules.

Each module defines routes for one stage of the pipeline.
"""

from routes.session import router as session_router
from routes.uploads import router as uploads_router
from routes.images import router as images_router
from routes.mappings import router as mappings_router
from routes.sheets import router as sheets_router
from routes.export import router as export_router

__all__ = [
    "session_router",
    "uploads_router",
    "images_router",
    "mappings_router",
    "sheets_router",
    "export_router",
]
