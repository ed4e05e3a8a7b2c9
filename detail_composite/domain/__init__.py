"""
Domain models.
"""

from detail_composite.domain.composite_config import CompositeConfig, FieldPart, Row
from detail_composite.domain.context import (
    BoundContext,
    ControlView,
    EnvironmentVariableDefinition,
    RequestContext,
    SaveRequest,
)

__all__ = [
    "CompositeConfig",
    "FieldPart",
    "Row",
    "BoundContext",
    "ControlView",
    "EnvironmentVariableDefinition",
    "RequestContext",
    "SaveRequest",
]
