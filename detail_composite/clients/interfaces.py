"""
Collaborator interfaces consumed by the composite engine.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from detail_composite.domain.context import EnvironmentVariableDefinition, SaveRequest


@runtime_checkable
class RecordStore(Protocol):
    """Record retrieval, shaped after the Xrm Web API."""

    async def retrieve_record(
        self, entity_name: str, entity_id: str, options: str = ""
    ) -> dict[str, Any]:
        ...

    async def retrieve_multiple_records(
        self, entity_name: str, options: str = ""
    ) -> list[dict[str, Any]]:
        ...


@runtime_checkable
class EnvironmentVariableStore(Protocol):
    """Lookup of externally stored configuration."""

    async def lookup_definition(self, schema_name: str) -> Optional[EnvironmentVariableDefinition]:
        ...

    async def lookup_current_value(self, definition_id: str) -> Optional[str]:
        ...


@runtime_checkable
class FieldMetadataProvider(Protocol):
    """Attribute metadata of the bound field."""

    async def get_max_length(self, entity_name: str, field_name: str) -> Optional[int]:
        ...


@runtime_checkable
class SaveTrigger(Protocol):
    """Best-effort persistence of the composed value."""

    async def save(self, request: SaveRequest) -> None:
        ...
