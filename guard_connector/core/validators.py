"""Validation helpers for composite-scalar attribute encodings."""
from __future__ import annotations
from typing import Optional, Tuple

from .guard.exceptions import InvalidAttributeValueError

VALUE_TYPE_SEPARATOR = "/"


def split_value_type(raw: str, attribute: str) -> Tuple[str, str]:
    """Split a ``value/type`` convenience encoding.

    Args:
        raw: Encoded value (e.g., "012-3456-7890/work")
        attribute: Attribute name for error messages

    Returns:
        Tuple of (value, type)

    Raises:
        InvalidAttributeValueError: If the separator is missing or repeated
    """
    parts = raw.split(VALUE_TYPE_SEPARATOR)
    if len(parts) != 2:
        raise InvalidAttributeValueError(f"Invalid {attribute}: {raw}")
    return parts[0], parts[1]


def join_value_type(value: Optional[str], type_: Optional[str]) -> str:
    return f"{value}{VALUE_TYPE_SEPARATOR}{type_ or ''}"
