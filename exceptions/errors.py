"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict.
Row-level import errors put row, field, expected and actual in details so
a counselor can fix the source spreadsheet without reading logs.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "APPLICATION_NOT_FOUND")
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
        self.timestamp = datetime.now(timezone.utc).isoformat()
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
# APPLICATION ERRORS
# ===================

class ApplicationNotFoundError(NotFoundError):
    """Scholarship application not found."""

    def __init__(self, application_id: str):
        super().__init__(
            resource="Scholarship application",
            identifier=application_id,
            code="APPLICATION_NOT_FOUND"
        )


# ===================
# SPREADSHEET ERRORS
# ===================

class DecodeError(ValidationError):
    """Uploaded bytes are not a readable spreadsheet."""

    def __init__(
        self,
        message: str = "Failed to read spreadsheet",
        details: Optional[dict] = None
    ):
        super().__init__(
            code="SPREADSHEET_DECODE_ERROR",
            message=message,
            details=details
        )


class RowValidationError(ValidationError):
    """
    A spreadsheet row failed validation.

    Base for every row-level rule. Row 0 means a single record submitted
    outside a spreadsheet.
    """

    def __init__(
        self,
        code: str,
        message: str,
        row: int,
        field: str,
        expected: Any = None,
        actual: Any = None,
    ):
        self.row = row
        self.field = field
        super().__init__(
            code=code,
            message=f"Row {row}: {message}" if row else message,
            details={
                "row": row,
                "field": field,
                "expected": expected,
                "actual": actual,
            }
        )


class StructuralError(RowValidationError):
    """Row is missing required cells."""

    def __init__(self, row: int, message: str = "row too short", field: str = "row",
                 expected: Any = None, actual: Any = None):
        super().__init__(
            code="ROW_STRUCTURE_INVALID",
            message=message,
            row=row,
            field=field,
            expected=expected,
            actual=actual,
        )


class CatalogViolationError(RowValidationError):
    """Row references a scholarship/honor/code combination outside the catalog."""

    def __init__(
        self,
        row: int,
        field: str,
        actual: Any,
        expected: Any = None,
        message: Optional[str] = None,
        code: str = "CATALOG_VIOLATION",
    ):
        super().__init__(
            code=code,
            message=message or f"{field} '{actual}' is not allowed by the catalog",
            row=row,
            field=field,
            expected=expected,
            actual=actual,
        )


class UnknownScholarshipError(CatalogViolationError):
    """Scholarship name not in catalog."""

    def __init__(self, row: int, scholarship: str, valid: list[str]):
        super().__init__(
            row=row,
            field="scholarship",
            actual=scholarship,
            expected=valid,
            message=f"unknown scholarship '{scholarship}'",
            code="UNKNOWN_SCHOLARSHIP",
        )


class UnknownHonorError(CatalogViolationError):
    """Honor name not in catalog."""

    def __init__(self, row: int, honor: str, valid: list[str]):
        super().__init__(
            row=row,
            field="honor",
            actual=honor,
            expected=valid,
            message=f"unknown honor '{honor}'",
            code="UNKNOWN_HONOR",
        )


class UnknownCodeError(CatalogViolationError):
    """Code not registered for the scholarship."""

    def __init__(self, row: int, code: str, scholarship: str, valid: list[str]):
        super().__init__(
            row=row,
            field="code",
            actual=code,
            expected=valid,
            message=f"code '{code}' does not belong to '{scholarship}'",
            code="UNKNOWN_CODE",
        )


class AmountMismatchError(CatalogViolationError):
    """Amount differs from the catalog's fixed award for the code."""

    def __init__(self, row: int, code: str, expected: int, actual: int):
        super().__init__(
            row=row,
            field="amount",
            actual=actual,
            expected=expected,
            message=f"amount {actual} does not match {expected} for code '{code}'",
            code="AMOUNT_MISMATCH",
        )


class MalformedAmountError(RowValidationError):
    """Amount cell is not a non-negative base-10 integer."""

    def __init__(self, row: int, actual: Any):
        super().__init__(
            code="MALFORMED_AMOUNT",
            message=f"amount '{actual}' is not a non-negative integer",
            row=row,
            field="amount",
            expected="non-negative integer",
            actual=actual,
        )


class SubmissionError(AppError):
    """Storage rejected a single imported row (502)."""

    def __init__(self, row: int, message: str, details: Optional[dict] = None):
        self.row = row
        super().__init__(
            code="ROW_SUBMISSION_FAILED",
            message=f"Row {row}: {message}",
            status_code=502,
            details={"row": row, **(details or {})}
        )


class EmptyResultError(AppError):
    """Export filter matched no applications (404)."""

    def __init__(self, scholarship: str, class_names: list[str]):
        super().__init__(
            code="EXPORT_EMPTY",
            message="No scholarship applications match the selection",
            status_code=404,
            details={"scholarship": scholarship, "class_names": class_names}
        )
