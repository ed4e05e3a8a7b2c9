"""
Configuration management using Pydantic Settings.
Loads settings from environment variables and .env files.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataverseSettings(BaseSettings):
    """Dataverse Web API configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DATAVERSE_")

    url: str = Field(
        default="https://org.crm.dynamics.com",
        description="Dataverse environment URL",
    )
    api_version: str = Field(default="v9.2", description="Web API version")
    access_token: str = Field(default="", description="OAuth bearer token for the Web API")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(default=3, description="Max attempts for transient failures")

    @property
    def api_url(self) -> str:
        """Base URL of the Web API endpoint."""
        return f"{self.url.rstrip('/')}/api/data/{self.api_version}/"


class EngineSettings(BaseSettings):
    """Composite engine configuration."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    autosave_delay_seconds: float = Field(
        default=0.5,
        description="Delay between a value change and the auto-save call",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="detail-composite", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=True, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Sub-settings
    dataverse: DataverseSettings = Field(default_factory=DataverseSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"app_env must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for accessing settings
settings = get_settings()
