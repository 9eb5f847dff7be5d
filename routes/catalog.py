"""
Catalog API routes.

Exposes the scholarship catalog so clients can build selectors.
"""

from fastapi import APIRouter

from config.catalog import get_catalog

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])


@router.get("")
async def get_scholarship_catalog():
    """Scholarships with their honor/code/amount entries, honors and class options."""
    return get_catalog().to_dict()
