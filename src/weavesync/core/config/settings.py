"""
Core configuration management for WeaveSync.

This module provides centralized configuration management using Pydantic settings
with support for environment variables and type validation. Task options
(URL, API key, class names) are not settings: they come from the task
definition. Settings only cover process-wide behaviour.

Classes:
    Settings: Main configuration class with all application settings

Environment Variables:
    Application settings can be overridden using environment variables with the
    same names as the class attributes (case-sensitive).

Example:
    >>> from weavesync.core.config.settings import Settings
    >>> settings = Settings()
    >>> print(settings.storage_path)
    .weavesync/storage

Configuration Sections:
    - Application: Basic app configuration (name, version, environment)
    - HTTP: Timeout and default scheme for Weaviate endpoints
    - Storage: Internal storage root and temp directory
    - Logging: Application logging configuration
"""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables using the
    same name as the attribute. For example, the HTTP_TIMEOUT environment
    variable overrides the HTTP_TIMEOUT setting.

    Attributes:
        APP_NAME: Application name identifier
        APP_VERSION: Current application version
        ENVIRONMENT: Deployment environment (development/testing/production)
        DEBUG: Enable debug mode with verbose logging

        HTTP_TIMEOUT: Timeout in seconds applied to every Weaviate request
        DEFAULT_SCHEME: Scheme used when a task URL has none

        STORAGE_DIR: Root directory of the internal storage
        TEMP_DIR: Parent directory for per-run temp directories (optional)

        LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        LOG_FORMAT: Log format (json/text)
        LOG_FILE_PATH: Path for log file output (optional)

    Properties:
        storage_path: STORAGE_DIR as a resolved Path
    """

    # Application
    APP_NAME: str = "WeaveSync"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # HTTP
    HTTP_TIMEOUT: float = 30.0
    DEFAULT_SCHEME: str = "https"

    # Storage
    STORAGE_DIR: str = ".weavesync/storage"
    TEMP_DIR: Optional[str] = None

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE_PATH: Optional[str] = None

    @property
    def storage_path(self) -> Path:
        """Internal storage root as a Path"""
        return Path(self.STORAGE_DIR).expanduser()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate logging level is a supported value.

        Ensures the log level is one of the standard Python logging
        levels. Converts to uppercase for consistency.

        Raises:
            ValueError: If log level is not supported
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("DEFAULT_SCHEME")
    @classmethod
    def validate_default_scheme(cls, v: str) -> str:
        if v.lower() not in ("http", "https"):
            raise ValueError("DEFAULT_SCHEME must be http or https")
        return v.lower()

    @field_validator("HTTP_TIMEOUT")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP_TIMEOUT must be positive")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance"""
    return Settings()


settings = Settings()
