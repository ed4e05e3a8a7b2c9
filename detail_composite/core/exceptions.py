"""
Custom exception hierarchy for the composite engine.
Provides structured error handling with user-facing messages and HTTP status codes.
"""

from typing import Any, Optional


class DetailCompositeError(Exception):
    """Base exception for all composite engine errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Configuration Errors (400)
# =============================================================================


class ConfigurationError(DetailCompositeError):
    """Composite configuration could not be used."""

    def __init__(
        self,
        message: str,
        code: str = "CONFIGURATION_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 400,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=status_code,
        )


class ConfigMissingError(ConfigurationError):
    """No configuration text was provided."""

    def __init__(self) -> None:
        super().__init__(
            message="configJson is empty: paste a JSON configuration in the control properties.",
            code="CONFIG_MISSING",
        )


class ConfigParseError(ConfigurationError):
    """Configuration text is not a well-formed configuration object."""

    def __init__(
        self,
        message: str = "configJson is not valid JSON.",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code="CONFIG_PARSE_ERROR", details=details)


class MissingJoinFieldError(ConfigurationError):
    """Cross-entity query configured without a join field."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(
            message="sourcefield is required when source entity differs from target.",
            code="MISSING_JOIN_FIELD",
            details={"source": source, "target": target},
        )


class NoFieldsError(ConfigurationError):
    """Neither rows nor template reference any field."""

    def __init__(self) -> None:
        super().__init__(
            message="No field names found: use 'rows' or 'formattedoutput' with {{fieldname}} placeholders.",
            code="NO_FIELDS",
            status_code=422,
        )


# =============================================================================
# Context Errors (400)
# =============================================================================


class ContextMissingError(DetailCompositeError):
    """Bound entity id or name is unavailable."""

    def __init__(self, missing: str) -> None:
        label = "Entity ID" if missing == "entity_id" else "Entity name"
        super().__init__(
            message=f"{label} not available from context. Ensure the control is placed on a form.",
            code="CONTEXT_MISSING",
            details={"missing": missing},
            status_code=400,
        )


# =============================================================================
# External Configuration Reference Errors
# =============================================================================


class EmptyReferenceError(ConfigurationError):
    """EnvironmentJson is present but blank."""

    def __init__(self) -> None:
        super().__init__(
            message="EnvironmentJson is specified but empty.",
            code="EMPTY_REFERENCE",
        )


class ReferenceNotFoundError(DetailCompositeError):
    """No environment variable definition exists for the reference name."""

    def __init__(self, schema_name: str) -> None:
        super().__init__(
            message=f"Environment variable '{schema_name}' not found.",
            code="REFERENCE_NOT_FOUND",
            details={"schema_name": schema_name},
            status_code=404,
        )


class ReferenceEmptyError(DetailCompositeError):
    """Environment variable has neither a current nor a default value."""

    def __init__(self, schema_name: str) -> None:
        super().__init__(
            message=f"Environment variable '{schema_name}' has no value.",
            code="REFERENCE_EMPTY",
            details={"schema_name": schema_name},
            status_code=422,
        )


# =============================================================================
# External Service Errors (502)
# =============================================================================


class FetchError(DetailCompositeError):
    """Error while reading from the record store."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 502,
    ) -> None:
        super().__init__(
            message=message,
            code="FETCH_ERROR",
            details=details,
            status_code=status_code,
        )


class DataverseError(FetchError):
    """Error communicating with the Dataverse Web API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=f"Dataverse error: {message}",
            details={"http_status": status_code, **(details or {})},
        )
        self.code = "DATAVERSE_ERROR"
        self.http_status = status_code

    @property
    def is_not_found(self) -> bool:
        """Check if the Web API reported a missing resource."""
        return self.http_status == 404
