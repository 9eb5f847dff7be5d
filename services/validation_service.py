"""
Record validation for imported scholarship rows.

Checks a candidate row against the structure of the import sheet and the
scholarship catalog. Rules run in a fixed order and the first failing rule
is raised. Validation is pure: the verdict depends only on the row and the
catalog.
"""

import re
from typing import Iterable
import structlog

from config.catalog import Catalog, get_catalog
from exceptions import (
    StructuralError,
    CatalogViolationError,
    UnknownScholarshipError,
    UnknownHonorError,
    UnknownCodeError,
    AmountMismatchError,
    MalformedAmountError,
    RowValidationError,
)
from models.application import ApplicationCreate
from parsers.spreadsheet_codec import (
    CandidateRow,
    COL_STUDENT_ID,
    COL_HONOR,
    COL_SCHOLARSHIP,
    COL_CODE,
    COL_AMOUNT,
)

logger = structlog.get_logger(__name__)

MIN_ROW_CELLS = 7

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")


class RecordValidator:
    """
    Validates candidate rows against a catalog.

    Usage:
        validator = RecordValidator(get_catalog())
        record = validator.validate(row)
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def validate(self, row: CandidateRow) -> ApplicationCreate:
        """
        Validate one candidate row.

        Args:
            row: Decoded sheet row

        Returns:
            ApplicationCreate ready for submission

        Raises:
            StructuralError: Row too short or student number missing
            UnknownScholarshipError / UnknownHonorError / UnknownCodeError:
                Value not in the catalog
            CatalogViolationError: Honor and code not paired for the scholarship
            MalformedAmountError: Amount is not a non-negative integer
            AmountMismatchError: Amount differs from the catalog's award
        """
        # Length up to the last populated cell; gaps inside the row count
        if len(row.cells) < MIN_ROW_CELLS:
            raise StructuralError(
                row=row.row_index,
                expected=f">= {MIN_ROW_CELLS} cells",
                actual=len(row.cells),
            )

        student_id = row.text(COL_STUDENT_ID)
        if not student_id:
            raise StructuralError(
                row=row.row_index,
                message="student number is empty",
                field="student_id",
                expected="student number",
                actual=None,
            )

        honor = row.text(COL_HONOR)
        scholarship = row.text(COL_SCHOLARSHIP)
        code = row.text(COL_CODE)

        self.check_catalog(row.row_index, scholarship, honor, code)

        amount = parse_amount(row.cell(COL_AMOUNT))
        if amount is None:
            raise MalformedAmountError(row.row_index, row.cell(COL_AMOUNT))

        self.check_amount(row.row_index, scholarship, code, amount)

        return ApplicationCreate(
            student_id=student_id,
            scholarship=scholarship,
            honor=honor,
            code=code,
            amount=amount,
        )

    def validate_application(self, data: ApplicationCreate) -> ApplicationCreate:
        """
        Catalog checks for a single record entered outside a spreadsheet.

        Errors are reported with row 0.
        """
        self.check_catalog(0, data.scholarship, data.honor, data.code)
        self.check_amount(0, data.scholarship, data.code, data.amount)
        return data

    def check_catalog(self, row_index: int, scholarship: str, honor: str, code: str) -> None:
        """Scholarship, then honor, then code, then the honor/code pairing."""
        names = self.catalog.scholarship_names()
        if scholarship not in names:
            raise UnknownScholarshipError(row_index, scholarship, list(names))

        if not self.catalog.is_valid_honor(honor):
            raise UnknownHonorError(row_index, honor, list(self.catalog.honors()))

        codes = self.catalog.codes_for(scholarship)
        if code not in codes:
            raise UnknownCodeError(row_index, code, scholarship, sorted(codes))

        if not self.catalog.is_valid_combination(scholarship, honor, code):
            raise CatalogViolationError(
                row=row_index,
                field="honor",
                actual=honor,
                expected=[
                    e.honor for e in self.catalog.entries_for(scholarship)
                    if e.code == code
                ],
                message=f"honor '{honor}' is not awarded under code '{code}' of '{scholarship}'",
            )

    def check_amount(self, row_index: int, scholarship: str, code: str, amount: int) -> None:
        expected = self.catalog.expected_amount(scholarship, code)
        if expected is not None and amount != expected:
            raise AmountMismatchError(row_index, code, expected, amount)

    def validate_all(self, rows: Iterable[CandidateRow]) -> list[tuple[int, ApplicationCreate]]:
        """
        Validate every row before anything is written.

        Stops at the first invalid row.

        Returns:
            (row_index, record) pairs in sheet order
        """
        validated = []
        for row in rows:
            try:
                validated.append((row.row_index, self.validate(row)))
            except RowValidationError as e:
                logger.warning(
                    "row_invalid",
                    row=row.row_index,
                    code=e.code,
                    field=e.field,
                    actual=e.details.get("actual"),
                )
                raise

        logger.info("rows_validated", count=len(validated))
        return validated


def parse_amount(value) -> int | None:
    """
    Parse an amount cell as a non-negative base-10 integer.

    3000 -> 3000, "3000" -> 3000, 3000.0 -> 3000
    "3000.5", "abc", -1, None -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if value != value or not value.is_integer():  # NaN or fractional
            return None
        return int(value) if value >= 0 else None

    text = str(value).strip()
    if not _INTEGER_RE.match(text):
        return None
    amount = int(text, 10)
    return amount if amount >= 0 else None


def get_record_validator() -> RecordValidator:
    """Validator bound to the department catalog."""
    return RecordValidator(get_catalog())
