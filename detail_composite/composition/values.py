"""
Field value extraction from fetched records.
"""

import json
from typing import Any, Mapping

from detail_composite.core.constants import FORMATTED_VALUE_SUFFIX, UNSERIALIZABLE_PLACEHOLDER


def safe_stringify(value: Any) -> str:
    """
    Convert any record value to display text.

    Lists render element by element joined with ", "; mappings and other
    objects render as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(safe_stringify(item) for item in value)

    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return UNSERIALIZABLE_PLACEHOLDER


def get_field_value(record: Mapping[str, Any], fieldname: str) -> str:
    """Read a field, preferring its formatted-value annotation."""
    if not record:
        return ""

    formatted = record.get(f"{fieldname}{FORMATTED_VALUE_SUFFIX}")
    if formatted is not None:
        return safe_stringify(formatted)

    return safe_stringify(record.get(fieldname))
