"""
Business logic services.

Each service handles one domain area.
"""

from services.application_service import ApplicationService, get_application_service
from services.validation_service import RecordValidator, get_record_validator, parse_amount
from services.import_service import ImportService, get_import_service
from services.export_service import ExportService, ExportFile, get_export_service
from services.search_service import get_field, matches, search, filter_exact

__all__ = [
    "ApplicationService",
    "get_application_service",
    "RecordValidator",
    "get_record_validator",
    "parse_amount",
    "ImportService",
    "get_import_service",
    "ExportService",
    "ExportFile",
    "get_export_service",
    "get_field",
    "matches",
    "search",
    "filter_exact",
]
