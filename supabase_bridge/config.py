"""
Configuration module for Supabase Bridge.

This module provides environment variable configuration and settings management
using Pydantic Settings for type-safe configuration.
"""
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_KEY = "change-me-in-production"


class BridgeSettings(BaseSettings):
    """
    Configuration settings for the Supabase Bridge application.

    All settings are loaded from environment variables with validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Required environment variables
    supabase_url: str = Field(
        ...,
        description="Base URL of the Supabase project (SUPABASE_URL)"
    )

    supabase_service_role_key: str = Field(
        ...,
        description="Service role key sent to the Supabase REST API (SUPABASE_SERVICE_ROLE_KEY)"
    )

    # Environment variables with defaults
    api_key: str = Field(
        DEFAULT_API_KEY,
        description="Shared secret callers must send in the x-api-key header (API_KEY)"
    )

    host: str = Field(
        "0.0.0.0",
        description="Interface the HTTP server binds to (HOST)"
    )

    port: int = Field(
        3000,
        description="Port the HTTP server listens on (PORT)"
    )

    log_level: str = Field(
        "INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        "*",
        description="Comma separated list of allowed CORS origins (CORS_ORIGINS)"
    )

    backend_timeout: Optional[float] = Field(
        None,
        description="Timeout in seconds for Supabase requests; unset waits indefinitely (BACKEND_TIMEOUT)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v):
        """Validate Supabase URL format."""
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("supabase_service_role_key")
    @classmethod
    def validate_service_key(cls, v):
        """Validate the service role key is not empty."""
        if not v or not v.strip():
            raise ValueError("SUPABASE_SERVICE_ROLE_KEY cannot be empty")
        return v.strip()

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v):
        """Reject an empty shared secret; the value is kept byte for byte."""
        if not v or not v.strip():
            raise ValueError("API_KEY cannot be empty")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("backend_timeout")
    @classmethod
    def validate_backend_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("BACKEND_TIMEOUT must be positive")
        return v

    def uses_default_api_key(self) -> bool:
        """Return True while the placeholder shared secret is still configured."""
        return self.api_key == DEFAULT_API_KEY

    def get_cors_origins(self) -> List[str]:
        """
        Split the configured CORS origins into a list.

        Returns:
            List[str]: Allowed origins, ["*"] when unrestricted
        """
        origins = [origin.strip() for origin in self.cors_origins.split(",")]
        return [origin for origin in origins if origin] or ["*"]


# Global settings instance
settings: Optional[BridgeSettings] = None


def get_settings() -> BridgeSettings:
    """
    Get the global settings instance, creating it if necessary.

    Environment variables are read once per process; later calls return
    the same instance.

    Returns:
        BridgeSettings: The global settings instance

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    global settings
    if settings is None:
        settings = BridgeSettings()
    return settings


def reload_settings() -> BridgeSettings:
    """
    Force reload settings from environment variables.

    This is useful for testing or when environment variables change.

    Returns:
        BridgeSettings: New settings instance
    """
    global settings
    settings = BridgeSettings()
    return settings
