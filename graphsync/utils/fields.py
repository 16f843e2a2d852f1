"""
Flatten raw Graph list field values into plain strings.

List columns come back in several shapes depending on the column type and on
how the list was configured: plain scalars, ``{"value": ...}`` wrappers,
``{"LookupValue": ...}`` lookups and arrays of either (multi-choice columns).
Every helper here degrades to an empty string instead of raising.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional

MULTI_VALUE_SEPARATOR = " - "


def extract(fields: Optional[Mapping[str, Any]], field_name: str) -> str:
    """Return the flattened value of ``field_name`` or ``""`` when absent."""
    if not isinstance(fields, Mapping) or field_name not in fields:
        return ""
    return normalize_value(fields[field_name])


def first_non_empty(
    fields: Optional[Mapping[str, Any]], candidates: Iterable[str]
) -> str:
    """Try each candidate key in order and return the first non-empty value."""
    for name in candidates:
        value = extract(fields, name)
        if value:
            return value
    return ""


def normalize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, bool, int, float)):
        return _scalar_text(value)
    if isinstance(value, list):
        return _join(value)
    if isinstance(value, dict):
        if "value" in value:
            return normalize_value(value["value"])
        if "LookupValue" in value:
            return normalize_value(value["LookupValue"])
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def coerce_identifier(value: Any) -> Optional[int]:
    """Parse a positive integer identifier; ``0``, negatives and junk give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        return coerce_identifier(value.get("value"))
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        number = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdecimal():
            return None
        number = int(text)
    else:
        return None
    return number if number > 0 else None


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _element_text(element: Any) -> str:
    if isinstance(element, (str, bool, int, float)):
        return _scalar_text(element)
    if isinstance(element, dict):
        for key in ("value", "LookupValue"):
            inner = element.get(key)
            if isinstance(inner, (str, bool, int, float)):
                return _scalar_text(inner)
    return ""


def _join(values: list) -> str:
    parts = [_element_text(element) for element in values]
    return MULTI_VALUE_SEPARATOR.join(part for part in parts if part)


__all__ = [
    "MULTI_VALUE_SEPARATOR",
    "coerce_identifier",
    "extract",
    "first_non_empty",
    "normalize_value",
]
