"""
System-wide constants for the composite engine.
"""

from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class ControlStatus(str, Enum):
    """Lifecycle states of one composite control."""

    IDLE = "idle"
    COMPUTING = "computing"
    ERROR = "error"


# =============================================================================
# API Constants
# =============================================================================

API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# =============================================================================
# Configuration Defaults
# =============================================================================

DEFAULT_SEPARATOR = "\n"
DEFAULT_TRUNCATE_WITH = "..."
DEFAULT_TOP = 1

# Placeholder syntax in formattedoutput templates
TEMPLATE_PLACEHOLDER_PATTERN = r"\{\{(\w+)\}\}"

# Rendered when a structured field value cannot be serialized
UNSERIALIZABLE_PLACEHOLDER = "[object]"

# =============================================================================
# Dataverse Constants
# =============================================================================

FORMATTED_VALUE_ANNOTATION = "OData.Community.Display.V1.FormattedValue"
FORMATTED_VALUE_SUFFIX = f"@{FORMATTED_VALUE_ANNOTATION}"

ENV_DEFINITION_ENTITY_SET = "environmentvariabledefinitions"
ENV_VALUE_ENTITY_SET = "environmentvariablevalues"

GUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
NUMERIC_PATTERN = r"^-?\d+(\.\d+)?$"

# =============================================================================
# Request Tracking
# =============================================================================

# Identity values that never match a real (config, id, name) triple
INITIAL_MARKER = "__init__"
REFRESH_MARKER = "__refresh__"
