"""
Spreadsheet codec for scholarship import/export files.

Both directions share one fixed column layout:

    应用ID | 学号 | 姓名 | 班级 | 荣誉 | 奖学金 | 代码 | 金额

Import reads the first sheet positionally and discards the first row
whatever it contains. Export always writes the header above as row 1, so
an exported file re-imports unchanged (the application ID column is
carried but never read back).
"""

import numbers
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Iterable, Sequence, Union
import structlog

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font

from exceptions import DecodeError

logger = structlog.get_logger(__name__)

# Column positions (0-based)
COL_APPLICATION_ID = 0
COL_STUDENT_ID = 1
COL_STUDENT_NAME = 2
COL_STUDENT_CLASS = 3
COL_HONOR = 4
COL_SCHOLARSHIP = 5
COL_CODE = 6
COL_AMOUNT = 7

HEADER = ["应用ID", "学号", "姓名", "班级", "荣誉", "奖学金", "代码", "金额"]
SHEET_TITLE = "奖学金"

COLUMN_WIDTHS = [38, 14, 12, 10, 16, 28, 12, 10]

Cell = Union[str, int, float, None]


@dataclass
class CandidateRow:
    """Unvalidated sheet row with its 1-based position in the source sheet."""
    row_index: int
    cells: list[Cell] = field(default_factory=list)

    @property
    def populated_count(self) -> int:
        return sum(1 for c in self.cells if cell_text(c) != "")

    def cell(self, position: int) -> Cell:
        """Cell at position, None when the row is shorter."""
        if position < len(self.cells):
            return self.cells[position]
        return None

    def text(self, position: int) -> str:
        """Trimmed string form of the cell at position."""
        return cell_text(self.cell(position))


def cell_text(value: Any) -> str:
    """
    Normalize a cell to trimmed text.

    2016000000.0 -> "2016000000"
    "  J3032030 " -> "J3032030"
    None / NaN -> ""
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def decode(data: Union[bytes, BytesIO]) -> list[CandidateRow]:
    """
    Parse an uploaded .xlsx file into candidate rows.

    Args:
        data: Raw file bytes (or a BytesIO over them)

    Returns:
        Candidate rows in sheet order, header and blank rows removed

    Raises:
        DecodeError: If the bytes are not a readable spreadsheet
    """
    file = BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
    logger.info("decoding_spreadsheet", file_type=type(data).__name__)

    try:
        excel = pd.ExcelFile(file, engine="openpyxl")
        if not excel.sheet_names:
            raise DecodeError(message="Spreadsheet has no sheets")
        df = excel.parse(excel.sheet_names[0], header=None, dtype=object)
    except DecodeError:
        raise
    except Exception as e:
        logger.error("spreadsheet_read_failed", error=str(e))
        raise DecodeError(
            message="Failed to read spreadsheet",
            details={"original_error": str(e)}
        )

    rows: list[CandidateRow] = []
    header_seen = False

    for position, values in enumerate(df.itertuples(index=False, name=None)):
        candidate = CandidateRow(
            row_index=position + 1,
            cells=_trim_trailing([_clean_cell(v) for v in values]),
        )

        # Skip blank rows
        if candidate.populated_count == 0:
            continue

        # First populated row is the header, never validated
        if not header_seen:
            header_seen = True
            continue

        rows.append(candidate)

    logger.info(
        "spreadsheet_decoded",
        sheet=excel.sheet_names[0],
        row_count=len(rows),
    )

    return rows


def encode(rows: Iterable[Sequence[Cell]]) -> bytes:
    """
    Write rows under the fixed header into a new .xlsx file.

    Args:
        rows: Data rows in column order (see HEADER)

    Returns:
        The workbook as bytes
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(HEADER)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    count = 0
    for row in rows:
        ws.append([_clean_cell(v) for v in row])
        # Text stays text, including values starting with "="
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str):
                cell.data_type = "s"
        count += 1

    for index, width in enumerate(COLUMN_WIDTHS):
        ws.column_dimensions[chr(ord("A") + index)].width = width

    output = BytesIO()
    wb.save(output)

    logger.info("spreadsheet_encoded", row_count=count)

    return output.getvalue()


# ===================
# HELPER FUNCTIONS
# ===================

def _clean_cell(value: Any) -> Cell:
    """Map pandas/openpyxl values onto str | int | float | None."""
    if value is None:
        return None
    if isinstance(value, float):
        if pd.isna(value):
            return None
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        return value
    if isinstance(value, numbers.Integral):
        return int(value)
    if pd.isna(value):
        return None
    return str(value)


def _trim_trailing(cells: list[Cell]) -> list[Cell]:
    """Drop empty cells at the end of a row."""
    end = len(cells)
    while end > 0 and cell_text(cells[end - 1]) == "":
        end -= 1
    return cells[:end]

