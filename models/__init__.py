"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.application import (
    Student,
    ApplicationCreate,
    ApplicationUpdate,
    ScholarshipApplicationResponse,
    ApplicationListResponse,
    is_url,
)
from models.import_job import (
    OutcomeStatus,
    ImportOutcome,
    ImportProgress,
    ImportReport,
)
from models.export import ExportSelection

__all__ = [
    # Base
    "BaseSchema",

    # Applications
    "Student",
    "ApplicationCreate",
    "ApplicationUpdate",
    "ScholarshipApplicationResponse",
    "ApplicationListResponse",
    "is_url",

    # Import
    "OutcomeStatus",
    "ImportOutcome",
    "ImportProgress",
    "ImportReport",

    # Export
    "ExportSelection",
]
