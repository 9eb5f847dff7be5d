"""
Export selection schema.
"""

from pydantic import Field

from config.catalog import ALL_CLASSES
from models.base import BaseSchema


class ExportSelection(BaseSchema):
    """
    Filter criteria for a spreadsheet export.

    scholarship_name "" selects every scholarship. class_names must name at
    least one class; "全部" selects every class.
    """

    scholarship_name: str = Field(default="", description="Scholarship name, empty for all")
    class_names: list[str] = Field(
        ...,
        min_length=1,
        description="Class names or fragments; include 全部 for all classes",
        examples=[["无61", "无72"], [ALL_CLASSES]],
    )

    @property
    def all_classes(self) -> bool:
        return ALL_CLASSES in self.class_names
