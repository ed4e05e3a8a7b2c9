"""
Dataverse Web API client.
Implements record retrieval, environment variable lookup, field metadata and
saving on top of the OData endpoint.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx

from detail_composite.clients.base_client import BaseWebAPIClient
from detail_composite.composition.literals import to_odata_literal
from detail_composite.core.config import settings
from detail_composite.core.constants import (
    ENV_DEFINITION_ENTITY_SET,
    ENV_VALUE_ENTITY_SET,
    FORMATTED_VALUE_ANNOTATION,
)
from detail_composite.core.exceptions import DataverseError
from detail_composite.core.logging import get_logger
from detail_composite.domain.context import EnvironmentVariableDefinition, SaveRequest, sanitize_guid

logger = get_logger(__name__)

# Attribute types that carry a MaxLength, checked in order
MAX_LENGTH_METADATA_TYPES = (
    "Microsoft.Dynamics.CRM.StringAttributeMetadata",
    "Microsoft.Dynamics.CRM.MemoAttributeMetadata",
)


def filter_options(expression: str, select: Optional[list[str]] = None, top: Optional[int] = None) -> str:
    """Query options with a percent-encoded $filter."""
    options = [f"$filter={quote(expression, safe='')}"]
    if select:
        options.insert(0, f"$select={','.join(select)}")
    if top is not None:
        options.append(f"$top={top}")
    return "?" + "&".join(options)


class DataverseClient(BaseWebAPIClient):
    """
    Client for the Dataverse Web API.

    Entity logical names are mapped to entity set names through the
    metadata endpoint once per name.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the Dataverse client.

        Args:
            url: Web API base URL (defaults to settings)
            access_token: OAuth bearer token (defaults to settings)
            timeout: Request timeout in seconds
            max_retries: Attempts for transient failures
            transport: Custom httpx transport (tests)
        """
        token = access_token if access_token is not None else settings.dataverse.access_token
        headers = {
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "Prefer": f'odata.include-annotations="{FORMATTED_VALUE_ANNOTATION}"',
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        super().__init__(
            base_url=url or settings.dataverse.api_url,
            timeout=timeout or settings.dataverse.timeout,
            max_retries=max_retries or settings.dataverse.max_retries,
            headers=headers,
            transport=transport,
        )

        self._entity_sets: dict[str, str] = {}
        self._max_lengths: dict[tuple[str, str], Optional[int]] = {}

    # -------------------------
    # Metadata
    # -------------------------

    async def get_entity_set_name(self, entity_name: str) -> str:
        """Resolve the entity set name used in URLs for a logical name."""
        logical_name = entity_name.lower()
        if logical_name in self._entity_sets:
            return self._entity_sets[logical_name]

        data = await self._get(
            f"EntityDefinitions(LogicalName={to_odata_literal(logical_name)})?$select=EntitySetName"
        )
        entity_set = data.get("EntitySetName")
        if not entity_set:
            raise DataverseError(f"Entity '{logical_name}' has no entity set name")

        self._entity_sets[logical_name] = entity_set
        logger.debug("Entity set resolved", entity=logical_name, entity_set=entity_set)
        return entity_set

    async def get_max_length(self, entity_name: str, field_name: str) -> Optional[int]:
        """MaxLength of a text attribute; None for other attribute types."""
        key = (entity_name.lower(), field_name.lower())
        if key in self._max_lengths:
            return self._max_lengths[key]

        base = (
            f"EntityDefinitions(LogicalName={to_odata_literal(key[0])})"
            f"/Attributes(LogicalName={to_odata_literal(key[1])})"
        )

        max_length: Optional[int] = None
        for metadata_type in MAX_LENGTH_METADATA_TYPES:
            try:
                data = await self._get(f"{base}/{metadata_type}?$select=MaxLength")
            except DataverseError as e:
                if e.is_not_found:
                    continue
                raise
            max_length = data.get("MaxLength")
            break

        self._max_lengths[key] = max_length
        return max_length

    # -------------------------
    # Records
    # -------------------------

    async def retrieve_record(
        self, entity_name: str, entity_id: str, options: str = ""
    ) -> dict[str, Any]:
        """Retrieve one record by id."""
        entity_set = await self.get_entity_set_name(entity_name)
        return await self._get(f"{entity_set}({sanitize_guid(entity_id)}){options}")

    async def retrieve_multiple_records(
        self, entity_name: str, options: str = ""
    ) -> list[dict[str, Any]]:
        """Retrieve the records matching the query options."""
        entity_set = await self.get_entity_set_name(entity_name)
        data = await self._get(f"{entity_set}{options}")
        return data.get("value", [])

    async def update_record(self, entity_name: str, entity_id: str, data: dict[str, Any]) -> None:
        """Update columns of one record."""
        entity_set = await self.get_entity_set_name(entity_name)
        await self._patch(f"{entity_set}({sanitize_guid(entity_id)})", data)

    # -------------------------
    # Environment variables
    # -------------------------

    async def lookup_definition(self, schema_name: str) -> Optional[EnvironmentVariableDefinition]:
        """Find an environment variable definition by schema name."""
        options = filter_options(
            f"schemaname eq {to_odata_literal(schema_name)}",
            select=["environmentvariabledefinitionid", "schemaname", "defaultvalue"],
        )
        data = await self._get(f"{ENV_DEFINITION_ENTITY_SET}{options}")
        definitions = data.get("value", [])
        if not definitions:
            return None
        return EnvironmentVariableDefinition.model_validate(definitions[0])

    async def lookup_current_value(self, definition_id: str) -> Optional[str]:
        """Current value set for a definition, if any."""
        options = filter_options(
            f"_environmentvariabledefinitionid_value eq {to_odata_literal(definition_id)}",
            select=["value"],
        )
        data = await self._get(f"{ENV_VALUE_ENTITY_SET}{options}")
        values = data.get("value", [])
        if not values:
            return None
        return values[0].get("value") or None

    async def health_check(self) -> bool:
        """Check if the Web API answers WhoAmI."""
        try:
            await self._get("WhoAmI")
            return True
        except DataverseError:
            return False


class DataverseSaveTrigger:
    """Saves the composed value by patching the bound record."""

    def __init__(self, client: DataverseClient) -> None:
        self.client = client

    async def save(self, request: SaveRequest) -> None:
        if not request.field_name:
            raise ValueError("No bound field to save the composite value into")

        await self.client.update_record(
            request.entity_name,
            request.entity_id,
            {request.field_name: request.value},
        )
        logger.info(
            "Composite value saved",
            entity=request.entity_name,
            entity_id=request.entity_id,
            field=request.field_name,
        )
