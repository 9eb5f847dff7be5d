"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    DatabaseError,

    # Applications
    ApplicationNotFoundError,

    # Spreadsheet import
    DecodeError,
    RowValidationError,
    StructuralError,
    CatalogViolationError,
    UnknownScholarshipError,
    UnknownHonorError,
    UnknownCodeError,
    AmountMismatchError,
    MalformedAmountError,
    SubmissionError,

    # Export
    EmptyResultError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "DatabaseError",

    # Applications
    "ApplicationNotFoundError",

    # Spreadsheet import
    "DecodeError",
    "RowValidationError",
    "StructuralError",
    "CatalogViolationError",
    "UnknownScholarshipError",
    "UnknownHonorError",
    "UnknownCodeError",
    "AmountMismatchError",
    "MalformedAmountError",
    "SubmissionError",

    # Export
    "EmptyResultError",
]
