"""
Repository implementations for data access.
"""

from detail_composite.repositories.cache_repo import EnvironmentConfigCache

__all__ = [
    "EnvironmentConfigCache",
]
