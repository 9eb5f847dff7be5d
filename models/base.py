"""
Shared schema base and field coercion.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for every request/response schema.

    Strings are trimmed, assignments re-validated and ORM/attribute
    objects accepted.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


def coerce_id(v: Any) -> Any:
    """
    Student numbers arrive as int or float from spreadsheets and the database.

    2016000000 -> "2016000000", 2016000000.0 -> "2016000000"
    """
    if isinstance(v, bool) or v is None:
        return v
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, int):
        return str(v)
    return v
