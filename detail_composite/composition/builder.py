"""
Composite string construction from a fetched record.
"""

from typing import Any, Mapping

from detail_composite.composition.rows import PLACEHOLDER_RE
from detail_composite.composition.values import get_field_value
from detail_composite.domain.composite_config import FieldPart, Row


def build_composite(record: Mapping[str, Any], rows: list[Row], separator: str) -> str:
    """
    Join rendered rows with the separator.

    Parts with an empty value are skipped; rows that render blank are
    dropped.
    """
    lines: list[str] = []

    for row in rows:
        line = "".join(
            part.render(get_field_value(record, part.fieldname))
            for part in row
            if part.fieldname
        )
        if line.strip():
            lines.append(line)

    return separator.join(lines)


def build_from_template(record: Mapping[str, Any], template: str, rows: list[Row]) -> str:
    """
    Substitute {{fieldname}} placeholders with decorated values.

    Decoration comes from the first row part naming the same field.
    """
    decorations: dict[str, FieldPart] = {}
    for row in rows:
        for part in row:
            if part.fieldname:
                decorations.setdefault(part.fieldname, part)

    def substitute(match: Any) -> str:
        fieldname = match.group(1)
        value = get_field_value(record, fieldname)
        part = decorations.get(fieldname)
        if part is None:
            return value
        return part.render(value)

    return PLACEHOLDER_RE.sub(substitute, template)
