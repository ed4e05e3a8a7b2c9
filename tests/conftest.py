"""
Pytest configuration and fixtures.
"""

from typing import Any, AsyncGenerator, Generator, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from detail_composite.api.deps import get_cache, get_composite_service
from detail_composite.clients.interfaces import (
    EnvironmentVariableStore,
    FieldMetadataProvider,
    RecordStore,
    SaveTrigger,
)
from detail_composite.composition.resolver import ConfigResolver
from detail_composite.domain.context import BoundContext, EnvironmentVariableDefinition
from detail_composite.main import app as application
from detail_composite.orchestration.coordinator import RequestCoordinator
from detail_composite.repositories.cache_repo import EnvironmentConfigCache
from detail_composite.services.composite_service import CompositeService

ACCOUNT_ID = "6f9619ff-8b86-d011-b42d-00c04fc964ff"


@pytest.fixture
def account_id() -> str:
    """Id of the bound account record."""
    return ACCOUNT_ID


@pytest.fixture
def account_record() -> dict[str, Any]:
    """Account as returned by the Web API, annotations included."""
    return {
        "accountid": ACCOUNT_ID,
        "name": "Contoso",
        "address1_city": "Seattle",
        "address1_postalcode": "98052",
        "industrycode": 7,
        "industrycode@OData.Community.Display.V1.FormattedValue": "Consulting",
        "telephone1": None,
    }


@pytest.fixture
def rows_config() -> str:
    """Two-row same-entity configuration."""
    return (
        '{"rows": ['
        '[{"fieldname": "name"}],'
        '[{"fieldname": "address1_postalcode", "suffix": " "}, {"fieldname": "address1_city"}],'
        '[{"fieldname": "telephone1", "displayname": "Tel: "}]'
        "]}"
    )


@pytest.fixture
def mock_record_store(account_record: dict[str, Any]) -> AsyncMock:
    """Create a mock record store."""
    store = AsyncMock(spec=RecordStore)
    store.retrieve_record = AsyncMock(return_value=account_record)
    store.retrieve_multiple_records = AsyncMock(return_value=[])
    return store


@pytest.fixture
def mock_environment_store() -> AsyncMock:
    """Create a mock environment variable store with no variables."""
    store = AsyncMock(spec=EnvironmentVariableStore)
    store.lookup_definition = AsyncMock(return_value=None)
    store.lookup_current_value = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_field_metadata() -> AsyncMock:
    """Create a mock field metadata provider without limits."""
    metadata = AsyncMock(spec=FieldMetadataProvider)
    metadata.get_max_length = AsyncMock(return_value=None)
    return metadata


@pytest.fixture
def mock_save_trigger() -> AsyncMock:
    """Create a mock save trigger."""
    trigger = AsyncMock(spec=SaveTrigger)
    trigger.save = AsyncMock(return_value=None)
    return trigger


@pytest.fixture
def env_cache() -> EnvironmentConfigCache:
    return EnvironmentConfigCache()


@pytest.fixture
def resolver(mock_environment_store: AsyncMock, env_cache: EnvironmentConfigCache) -> ConfigResolver:
    return ConfigResolver(mock_environment_store, env_cache)


@pytest.fixture
def service(
    mock_record_store: AsyncMock,
    resolver: ConfigResolver,
    mock_field_metadata: AsyncMock,
) -> CompositeService:
    return CompositeService(
        record_store=mock_record_store,
        resolver=resolver,
        field_metadata=mock_field_metadata,
    )


@pytest.fixture
def notifications() -> list[int]:
    """Collects host notifications."""
    return []


@pytest.fixture
def coordinator(
    service: CompositeService,
    mock_save_trigger: AsyncMock,
    notifications: list[int],
) -> RequestCoordinator:
    return RequestCoordinator(
        service=service,
        save_trigger=mock_save_trigger,
        on_output_changed=lambda: notifications.append(1),
        autosave_delay_seconds=0,
    )


@pytest.fixture
def app(service: CompositeService, env_cache: EnvironmentConfigCache) -> Generator[FastAPI, None, None]:
    """Application wired to the mocked service and a fresh cache."""
    application.dependency_overrides[get_composite_service] = lambda: service
    application.dependency_overrides[get_cache] = lambda: env_cache
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def make_context(
    config_raw: str,
    entity_id: str = ACCOUNT_ID,
    entity_name: str = "account",
    bound_value: Optional[str] = None,
    bound_field: Optional[str] = "description",
) -> BoundContext:
    """Bound context as the host would report it."""
    return BoundContext(
        config_raw=config_raw,
        entity_id=entity_id,
        entity_name=entity_name,
        bound_value=bound_value,
        bound_field=bound_field,
    )


def make_definition(definition_id: str = "def-1", default_value: Optional[str] = None) -> EnvironmentVariableDefinition:
    return EnvironmentVariableDefinition(
        environmentvariabledefinitionid=definition_id,
        schemaname="new_CompositeConfig",
        defaultvalue=default_value,
    )
