"""
Cache repository for resolved environment configurations.
"""

from datetime import datetime
from typing import Any, Optional

from detail_composite.core.logging import get_logger

logger = get_logger(__name__)


class EnvironmentConfigCache:
    """
    In-memory cache of environment variable JSON by schema name.

    Entries never expire; they stay until ``clear()`` (refresh or
    teardown) or ``delete()`` removes them. Every ``clear()`` starts a new
    generation; a writer that read its value in an earlier generation
    passes that generation to ``set()`` and the write is dropped.
    """

    def __init__(self) -> None:
        self._cache: dict[str, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of times the cache has been cleared."""
        return self._generation

    def get(self, schema_name: str) -> Optional[str]:
        """Get a cached configuration text."""
        entry = self._cache.get(schema_name)
        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return entry["value"]

    def set(self, schema_name: str, value: str, generation: Optional[int] = None) -> bool:
        """
        Cache a configuration text.

        Returns:
            False if the value was read before the last clear and was not stored
        """
        if generation is not None and generation != self._generation:
            logger.debug("Dropping write from before cache clear", key=schema_name)
            return False

        self._cache[schema_name] = {
            "value": value,
            "created_at": datetime.utcnow(),
        }
        logger.debug("Cache set", key=schema_name, size=len(value))
        return True

    def delete(self, schema_name: str) -> bool:
        """Delete a key from cache."""
        if schema_name in self._cache:
            del self._cache[schema_name]
            return True
        return False

    def exists(self, schema_name: str) -> bool:
        """Check if a key exists in cache."""
        return schema_name in self._cache

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._cache)
        self._cache.clear()
        self._generation += 1
        logger.info("Cache cleared", count=count)

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "total_entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
        }

    def __len__(self) -> int:
        return len(self._cache)
