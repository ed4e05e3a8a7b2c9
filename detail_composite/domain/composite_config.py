"""
Composite configuration domain model.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from detail_composite.core.constants import (
    DEFAULT_SEPARATOR,
    DEFAULT_TOP,
    DEFAULT_TRUNCATE_WITH,
)


class FieldPart(BaseModel):
    """One field reference inside a row."""

    model_config = ConfigDict(frozen=True)

    fieldname: str = Field(default="", description="Logical name of the field to read")
    displayname: Optional[str] = Field(default=None, description="Prefix rendered before a non-empty value")
    suffix: Optional[str] = Field(default=None, description="Text rendered after a non-empty value")

    def render(self, value: str) -> str:
        """Decorate a non-empty value; empty values render as nothing."""
        if not value:
            return ""
        return f"{self.displayname or ''}{value}{self.suffix or ''}"


Row = list[FieldPart]


class CompositeConfig(BaseModel):
    """
    Resolved configuration for one computation.

    Property names follow the JSON the control is configured with;
    JSON nulls are treated as unset so the documented defaults apply.
    Unknown properties such as ``lookupfield`` are kept but never read.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    source: Optional[str] = Field(default=None, description="Source entity (defaults to target)")
    sourcefield: Optional[str] = Field(
        default=None, description="Join field on the source entity, required when source != target"
    )

    separator: str = Field(default=DEFAULT_SEPARATOR, description="Separator between rows")
    truncate_with: str = Field(
        default=DEFAULT_TRUNCATE_WITH, alias="truncateWith", description="Truncation indicator"
    )
    top: int = Field(default=DEFAULT_TOP, description="Max records for related-entity retrieval")
    order_by: Optional[str] = Field(default=None, alias="orderBy", description="e.g. 'createdon desc'")

    rows: Optional[list[Row]] = Field(default=None, description="Rows of field parts")
    fields: Optional[list[Any]] = Field(
        default=None, description="Legacy rows: objects whose values are lists of field parts"
    )

    formattedoutput: Optional[str] = Field(
        default=None, description="Output template using {{fieldname}} placeholders"
    )
    auto_save: bool = Field(default=True, alias="autoSave", description="Save after a value change")

    environment_json: Optional[str] = Field(
        default=None,
        alias="EnvironmentJson",
        description="Schema name of an environment variable holding the actual JSON config",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def source_entity(self, target: str) -> str:
        """Entity to query, lower-cased; blank or unset means the target."""
        source = (self.source or "").strip()
        return (source or target).lower()

    @property
    def template(self) -> Optional[str]:
        """Output template, if one is configured."""
        return self.formattedoutput or None
