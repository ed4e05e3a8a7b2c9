"""
Configuration resolution, including indirection through environment variables.
"""

import json
from typing import Any, Optional

from pydantic import ValidationError

from detail_composite.clients.interfaces import EnvironmentVariableStore
from detail_composite.core.exceptions import (
    ConfigParseError,
    EmptyReferenceError,
    FetchError,
    ReferenceEmptyError,
    ReferenceNotFoundError,
)
from detail_composite.core.logging import get_logger
from detail_composite.domain.composite_config import CompositeConfig
from detail_composite.repositories.cache_repo import EnvironmentConfigCache

logger = get_logger(__name__)


def parse_config_data(raw: str, origin: Optional[str] = None) -> dict[str, Any]:
    """
    Parse configuration text into a JSON object.

    Args:
        raw: Configuration text
        origin: Environment variable name the text came from, if any

    Raises:
        ConfigParseError: If the text is not a JSON object
    """
    if origin:
        message = f"Environment variable '{origin}' does not contain valid JSON."
    else:
        message = "configJson is not valid JSON."

    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ConfigParseError(message, details={"reason": str(e)}) from e

    if not isinstance(data, dict):
        raise ConfigParseError(message, details={"reason": "top-level value is not an object"})
    return data


def to_config(data: dict[str, Any]) -> CompositeConfig:
    """Validate parsed JSON against the configuration shape."""
    try:
        return CompositeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(
            "configJson does not match the expected configuration shape.",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


class ConfigResolver:
    """
    Produces the final configuration for one computation.

    When the configuration names an environment variable through
    ``EnvironmentJson``, the variable's JSON is fetched (once per cache
    lifetime) and merged over the initial configuration.
    """

    def __init__(
        self,
        environment_store: EnvironmentVariableStore,
        cache: Optional[EnvironmentConfigCache] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            environment_store: Source of environment variable definitions/values
            cache: Owned cache of resolved variable text
        """
        self.environment_store = environment_store
        self.cache = cache if cache is not None else EnvironmentConfigCache()

    async def resolve(self, raw: str) -> CompositeConfig:
        """
        Resolve raw configuration text.

        Raises:
            ConfigParseError: Malformed configuration or variable content
            EmptyReferenceError: EnvironmentJson is blank
            ReferenceNotFoundError: No such environment variable
            ReferenceEmptyError: Variable has no current or default value
        """
        initial_data = parse_config_data(raw)
        initial = to_config(initial_data)

        if not initial.environment_json:
            return initial

        schema_name = initial.environment_json.strip()
        if not schema_name:
            raise EmptyReferenceError()

        env_text = await self.get_environment_value(schema_name)
        env_data = parse_config_data(env_text, origin=schema_name)

        # Environment values win; initial-only properties remain as defaults
        return to_config({**initial_data, **env_data})

    async def get_environment_value(self, schema_name: str) -> str:
        """Current value of an environment variable, falling back to its default."""
        cached = self.cache.get(schema_name)
        if cached is not None:
            return cached

        generation = self.cache.generation

        try:
            definition = await self.environment_store.lookup_definition(schema_name)
            if definition is None:
                raise ReferenceNotFoundError(schema_name)
            current = await self.environment_store.lookup_current_value(definition.definition_id)
        except FetchError as e:
            logger.error("Environment variable fetch failed", schema_name=schema_name, error=e.message)
            raise FetchError(
                f"Failed to fetch environment variable '{schema_name}': {e.message}",
                details={"schema_name": schema_name, **e.details},
            ) from e

        value = current or definition.default_value or ""
        if not value:
            raise ReferenceEmptyError(schema_name)

        self.cache.set(schema_name, value, generation)
        logger.debug(
            "Environment variable resolved",
            schema_name=schema_name,
            from_default=not current,
        )
        return value
