"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.applications import router as applications_router
from routes.catalog import router as catalog_router

__all__ = [
    "applications_router",
    "catalog_router",
]
