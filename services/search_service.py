"""
Table search over scholarship applications.

Literal, case-insensitive substring matching on a (possibly nested) field,
e.g. "student.name" or ("student", "class"). Works on dicts, pydantic
models and plain objects alike.
"""

from typing import Any, Iterable, Mapping, Sequence, Union

from pydantic import BaseModel

FieldPath = Union[str, Sequence[str]]


def get_field(record: Any, field_path: FieldPath) -> Any:
    """
    Resolve a field path on a record.

    Args:
        record: dict, pydantic model or object
        field_path: Dotted string or sequence of keys

    Returns:
        The value, or None if any step is missing
    """
    keys = field_path.split(".") if isinstance(field_path, str) else list(field_path)

    value = record
    for key in keys:
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(key)
        else:
            value = _attribute(value, key)
    return value


def matches(record: Any, field_path: FieldPath, query: Any) -> bool:
    """
    Case-insensitive substring test of query against the field's text.

    An empty query matches everything; a missing field matches nothing else.
    """
    needle = "" if query is None else str(query).lower()
    if not needle:
        return True

    value = get_field(record, field_path)
    if value is None:
        return False
    return needle in str(value).lower()


def search(records: Iterable[Any], field_path: FieldPath, query: Any) -> list:
    """Records whose field contains query."""
    return [r for r in records if matches(r, field_path, query)]


def filter_exact(records: Iterable[Any], field_path: FieldPath, values: Iterable[Any]) -> list:
    """
    Records whose field equals one of values.

    Used by the honor and scholarship column filters. No values means no
    filtering.
    """
    wanted = set(values)
    if not wanted:
        return list(records)
    return [r for r in records if get_field(r, field_path) in wanted]


def _attribute(obj: Any, key: str) -> Any:
    if isinstance(obj, BaseModel):
        # Allow alias names, e.g. "class" for Student.class_name
        for name, info in type(obj).model_fields.items():
            if info.alias == key:
                return getattr(obj, name)
    return getattr(obj, key, None)
