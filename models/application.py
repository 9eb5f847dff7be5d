"""
Scholarship application schemas for validation and serialization.
"""

from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import ConfigDict, Field, computed_field, field_validator

from models.base import BaseSchema, coerce_id


def is_url(value: Optional[str]) -> bool:
    """True if value looks like an absolute http(s) URL."""
    if not value:
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class Student(BaseSchema):
    """Student as joined onto counselor listings."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str = Field(..., description="Student number")
    name: Optional[str] = None
    class_name: Optional[str] = Field(None, alias="class", description="Class, e.g. 无61")
    department: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> Any:
        return coerce_id(v)


class ApplicationCreate(BaseSchema):
    """
    Create a new scholarship application.

    Used both for single counselor entries and for imported rows.
    """

    student_id: str = Field(..., min_length=1, description="Student number")
    scholarship: str = Field(..., min_length=1)
    honor: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, description="Award in yuan")

    @field_validator("student_id", mode="before")
    @classmethod
    def student_id_as_string(cls, v: Any) -> Any:
        return coerce_id(v)


class ApplicationUpdate(BaseSchema):
    """
    Student edit of their own application.

    Only the form link and the thank-you letter body are editable.
    """

    form_url: Optional[str] = Field(None, max_length=2000)
    thank_letter: Optional[str] = Field(None, max_length=10000)


class ScholarshipApplicationResponse(BaseSchema):
    """Scholarship application with all fields."""

    id: str = Field(..., description="Application UUID")
    student_id: str
    student: Optional[Student] = None
    honor: str
    scholarship: str
    code: str
    amount: int = Field(..., ge=0)
    form_url: Optional[str] = None
    thank_letter: Optional[str] = None

    @field_validator("student_id", mode="before")
    @classmethod
    def student_id_as_string(cls, v: Any) -> Any:
        return coerce_id(v)

    @computed_field
    @property
    def form_url_is_link(self) -> bool:
        """Whether form_url should be rendered as a link."""
        return is_url(self.form_url)


class ApplicationListResponse(BaseSchema):
    """List of applications."""

    data: list[ScholarshipApplicationResponse]
    total: int
