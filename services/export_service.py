"""
Export service — Generate scholarship spreadsheets.

Filters applications by scholarship and class, projects them onto the fixed
import/export columns and encodes them as .xlsx. Also produces the sample
file counselors fill in for imports.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional
import structlog

from exceptions import EmptyResultError
from models.export import ExportSelection
from parsers.spreadsheet_codec import encode
from services.search_service import get_field

logger = structlog.get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

FILENAME_PREFIX = "奖学金"
TEMPLATE_FILENAME = "奖学金-导入样例.xlsx"

# Rows written into the import sample
TEMPLATE_STUDENT = {
    "id": "2016000000",
    "name": "测试学生",
    "department": "电子系",
    "class": "无60",
}
TEMPLATE_APPLICATIONS = [
    {
        "id": "8ac0f001-8d9f-4de7-96c5-9fbfb638ad5f",
        "student": TEMPLATE_STUDENT,
        "honor": "好读书奖",
        "code": "J3032030",
        "scholarship": "好读书奖学金",
        "amount": 3000,
    },
    {
        "id": "8bc0f001-8d9f-4de7-96c5-9fbfb638ad5f",
        "student": TEMPLATE_STUDENT,
        "honor": "好读书奖",
        "code": "J3032080",
        "scholarship": "好读书奖学金",
        "amount": 8000,
    },
    {
        "id": "8cc0f001-8d9f-4de7-96c5-9fbfb638ad5f",
        "student": TEMPLATE_STUDENT,
        "honor": "学业优秀奖",
        "code": "J2022050",
        "scholarship": "清华之友——华为奖学金",
        "amount": 5000,
    },
]


@dataclass
class ExportFile:
    """Generated spreadsheet ready for download."""
    filename: str
    content: bytes
    row_count: int
    media_type: str = XLSX_MEDIA_TYPE


def export_filename(scholarship_name: str) -> str:
    """
    Download name for an export.

    "好读书奖学金" -> "奖学金-好读书奖学金.xlsx"
    "" -> "奖学金.xlsx"
    """
    if scholarship_name:
        return f"{FILENAME_PREFIX}-{scholarship_name}.xlsx"
    return f"{FILENAME_PREFIX}.xlsx"


def matches_selection(record: Any, selection: ExportSelection) -> bool:
    """True if record passes the scholarship and class filters."""
    if selection.scholarship_name and get_field(record, "scholarship") != selection.scholarship_name:
        return False

    if selection.all_classes:
        return True

    # Fragments match partial and legacy class names, e.g. "无6" -> "无61"
    student_class = get_field(record, "student.class")
    if not student_class:
        return False
    return any(fragment in str(student_class) for fragment in selection.class_names)


def project_row(record: Any) -> list:
    """Record -> [应用ID, 学号, 姓名, 班级, 荣誉, 奖学金, 代码, 金额]."""
    student_id = get_field(record, "student.id")
    if student_id is None:
        student_id = get_field(record, "student_id")

    return [
        get_field(record, "id"),
        student_id,
        get_field(record, "student.name"),
        get_field(record, "student.class"),
        get_field(record, "honor"),
        get_field(record, "scholarship"),
        get_field(record, "code"),
        get_field(record, "amount"),
    ]


class ExportService:
    """Service for generating scholarship export files."""

    def filter_applications(
        self,
        applications: Iterable[Any],
        selection: ExportSelection,
    ) -> list:
        """Applications matching the selection, order preserved."""
        return [a for a in applications if matches_selection(a, selection)]

    def export(
        self,
        applications: Iterable[Any],
        selection: ExportSelection,
    ) -> ExportFile:
        """
        Generate the export spreadsheet for a selection.

        Args:
            applications: Full application set (counselor listing)
            selection: Scholarship / class filter

        Returns:
            ExportFile with name and .xlsx bytes

        Raises:
            EmptyResultError: If nothing matches the selection
        """
        selected = self.filter_applications(applications, selection)

        logger.info(
            "generating_export",
            scholarship=selection.scholarship_name or "*",
            class_names=selection.class_names,
            matched=len(selected),
        )

        if not selected:
            raise EmptyResultError(selection.scholarship_name, selection.class_names)

        content = encode(project_row(a) for a in selected)
        filename = export_filename(selection.scholarship_name)

        logger.info("export_generated", filename=filename, row_count=len(selected))

        return ExportFile(filename=filename, content=content, row_count=len(selected))

    def generate_import_template(self) -> ExportFile:
        """Sample spreadsheet in the import layout, with three valid rows."""
        content = encode(project_row(a) for a in TEMPLATE_APPLICATIONS)

        logger.info("import_template_generated", row_count=len(TEMPLATE_APPLICATIONS))

        return ExportFile(
            filename=TEMPLATE_FILENAME,
            content=content,
            row_count=len(TEMPLATE_APPLICATIONS),
        )


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
