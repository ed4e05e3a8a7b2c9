"""
Row normalization and field reference collection.
"""

import re
from typing import Iterable, Optional

from pydantic import ValidationError

from detail_composite.core.constants import TEMPLATE_PLACEHOLDER_PATTERN
from detail_composite.core.exceptions import ConfigParseError, NoFieldsError
from detail_composite.domain.composite_config import CompositeConfig, FieldPart, Row

PLACEHOLDER_RE = re.compile(TEMPLATE_PLACEHOLDER_PATTERN, re.ASCII)


def normalize_rows(config: CompositeConfig) -> list[Row]:
    """
    Return the configured rows in canonical shape.

    Canonical ``rows`` win when non-empty. Otherwise each legacy ``fields``
    object becomes one row, taking the first part listed under each key.
    """
    if config.rows:
        return config.rows

    if not config.fields:
        return []

    rows: list[Row] = []
    for legacy in config.fields:
        if not isinstance(legacy, dict):
            continue

        parts: Row = []
        for items in legacy.values():
            if not isinstance(items, list) or not items:
                continue
            item = items[0] if isinstance(items[0], dict) else {}
            try:
                part = FieldPart(
                    fieldname=item.get("fieldname") or "",
                    displayname=item.get("displayname") or "",
                    suffix=item.get("suffix") or "",
                )
            except ValidationError as e:
                raise ConfigParseError(
                    "configJson does not match the expected configuration shape.",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e
            parts.append(part)
        if parts:
            rows.append(parts)

    return rows


def extract_template_fields(template: Optional[str]) -> list[str]:
    """Field names referenced as {{fieldname}} placeholders, in order."""
    if not template:
        return []
    return PLACEHOLDER_RE.findall(template)


def unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def collect_field_names(rows: list[Row], template: Optional[str] = None) -> list[str]:
    """
    Distinct field names referenced by rows and template.

    Raises:
        NoFieldsError: If nothing references a field
    """
    from_rows = [part.fieldname for row in rows for part in row if part.fieldname]
    names = unique([*from_rows, *extract_template_fields(template)])
    if not names:
        raise NoFieldsError()
    return names
