"""
Host context domain models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from detail_composite.core.constants import ControlStatus


def sanitize_guid(value: str) -> str:
    """Strip enclosing brace characters from an identifier."""
    return value.replace("{", "").replace("}", "")


@dataclass(frozen=True)
class RequestContext:
    """Identity of one computation; compared by value to detect changes."""

    config_raw: str
    entity_id: str
    entity_name: str


@dataclass(frozen=True)
class BoundContext:
    """Inputs the host hands the control on every update."""

    config_raw: str
    entity_id: str
    entity_name: str
    bound_value: Optional[str] = None
    bound_field: Optional[str] = None

    @classmethod
    def from_host(
        cls,
        config_raw: Optional[str],
        entity_ids: tuple[Optional[str], ...] = (),
        entity_names: tuple[Optional[str], ...] = (),
        bound_value: Optional[str] = None,
        bound_field: Optional[str] = None,
    ) -> "BoundContext":
        """
        Build a context from the host's candidate sources.

        Candidates are checked in order (form context, page, explicit
        parameters); the first non-empty one wins. Ids lose their braces,
        names are lower-cased.
        """
        entity_id = next((sanitize_guid(c) for c in entity_ids if c), "")
        entity_name = next((c.lower() for c in entity_names if c), "")
        return cls(
            config_raw=config_raw or "",
            entity_id=entity_id,
            entity_name=entity_name,
            bound_value=bound_value if isinstance(bound_value, str) else None,
            bound_field=bound_field,
        )

    @property
    def request(self) -> RequestContext:
        return RequestContext(self.config_raw, self.entity_id, self.entity_name)


@dataclass(frozen=True)
class ControlView:
    """What the rendering surface displays."""

    value: str
    is_loading: bool
    error: Optional[str] = None
    status: ControlStatus = ControlStatus.IDLE


@dataclass(frozen=True)
class SaveRequest:
    """Value to persist into the bound field."""

    entity_name: str
    entity_id: str
    field_name: Optional[str]
    value: str


class EnvironmentVariableDefinition(BaseModel):
    """Environment variable definition row."""

    definition_id: str = Field(..., alias="environmentvariabledefinitionid")
    schema_name: str = Field(default="", alias="schemaname")
    default_value: Optional[str] = Field(default=None, alias="defaultvalue")

    model_config = {"populate_by_name": True}
