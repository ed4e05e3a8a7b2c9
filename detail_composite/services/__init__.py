"""
Service layer implementations.
"""

from detail_composite.services.composite_service import CompositeResult, CompositeService

__all__ = [
    "CompositeResult",
    "CompositeService",
]
