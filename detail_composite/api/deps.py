"""
API dependencies for dependency injection.
"""

from typing import Optional

from detail_composite.clients.dataverse_client import DataverseClient
from detail_composite.composition.resolver import ConfigResolver
from detail_composite.repositories.cache_repo import EnvironmentConfigCache
from detail_composite.services.composite_service import CompositeService


class ServiceContainer:
    """
    Container for all application services.
    Provides singleton instances of services.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._initialized = False

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def initialize(self) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        self._dataverse_client = DataverseClient()  # Uses settings.dataverse by default
        self._cache = EnvironmentConfigCache()
        self._resolver = ConfigResolver(self._dataverse_client, self._cache)
        self._composite_service = CompositeService(
            record_store=self._dataverse_client,
            resolver=self._resolver,
            field_metadata=self._dataverse_client,
        )

        self._initialized = True

    async def shutdown(self) -> None:
        """Release HTTP connections and cached configuration."""
        if not self._initialized:
            return
        self._cache.clear()
        await self._dataverse_client.close()

    @property
    def dataverse_client(self) -> DataverseClient:
        """Get the Dataverse client."""
        self.initialize()
        return self._dataverse_client

    @property
    def composite_service(self) -> CompositeService:
        """Get the composite service."""
        self.initialize()
        return self._composite_service

    @property
    def cache(self) -> EnvironmentConfigCache:
        """Get the environment configuration cache."""
        self.initialize()
        return self._cache


# Singleton container instance
container = ServiceContainer.get_instance()


# Dependency functions for FastAPI
def get_composite_service() -> CompositeService:
    """Get the composite service instance."""
    return container.composite_service


def get_dataverse_client() -> DataverseClient:
    """Get the Dataverse client instance."""
    return container.dataverse_client


def get_cache() -> EnvironmentConfigCache:
    """Get the environment configuration cache instance."""
    return container.cache
