"""
OData filter literal encoding.
"""

import re

from detail_composite.core.constants import GUID_PATTERN, NUMERIC_PATTERN
from detail_composite.domain.context import sanitize_guid

_GUID_RE = re.compile(GUID_PATTERN, re.ASCII)
_NUMERIC_RE = re.compile(NUMERIC_PATTERN, re.ASCII)


def is_guid(value: str) -> bool:
    """Check for the 8-4-4-4-12 hex shape, braces allowed."""
    return bool(_GUID_RE.match(sanitize_guid(value)))


def to_odata_literal(value: str) -> str:
    """
    Encode a raw identifier as an OData filter literal.

    GUIDs and numerals are emitted unquoted; anything else becomes a
    single-quoted string with embedded quotes doubled.

    Examples:
        >>> to_odata_literal("{6F9619FF-8B86-D011-B42D-00C04FC964FF}")
        '6F9619FF-8B86-D011-B42D-00C04FC964FF'
        >>> to_odata_literal("O'Brien")
        "'O''Brien'"
    """
    trimmed = value.strip()
    if is_guid(trimmed):
        return sanitize_guid(trimmed)

    if _NUMERIC_RE.match(trimmed):
        return trimmed

    escaped = trimmed.replace("'", "''")
    return f"'{escaped}'"
