"""
Configuration Management

Uses Pydantic BaseSettings to load configuration from environment variables.
All settings can be overridden via .env file or environment variables.

Environment Variables:
    APP_ENV: Environment name (development/staging/production)
    DEBUG: Enable debug mode (default: False)
    CONFLICT_WINDOW_MINUTES: Proximity window for double-booking (default: 45)
    DEFAULT_HOUR: Hour assigned to date-only expressions (default: 12)
    STORAGE_DIR: Directory holding the appointment file (default: ./data)
    STORAGE_KEY: Fixed identifier of the appointment file
    SESSION_TTL_SECONDS: Idle seconds before a session expires (default: 3600)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Environment
    app_env: Literal["development", "staging", "production"] = "development"
    """Current application environment.

    Options:
    - development: Local development, verbose logging, docs enabled
    - staging: Pre-production testing environment
    - production: Live environment, minimal logging
    """

    debug: bool = False
    """Enable debug mode (DEBUG log level, error details in responses)."""

    # Application Configuration
    app_name: str = "callflow"
    """Application name."""

    host: str = "0.0.0.0"
    """Host to bind the application server."""

    port: int = 8000
    """Port to bind the application server."""

    cors_origins: str = "http://localhost:3000"
    """Comma-separated list of allowed CORS origins."""

    # Scheduling
    conflict_window_minutes: int = 45
    """Two calls closer than this many minutes conflict.

    Also used when a cancel or reschedule request names a time instead
    of an attendee.
    """

    default_hour: int = 12
    """Hour of day given to expressions like "Friday" that name no time."""

    # Persistence
    storage_dir: str = "./data"
    """Directory for the appointment file."""

    storage_key: str = "callflow-appointments"
    """Fixed identifier of the stored appointment collection."""

    persist_appointments: bool = True
    """Write appointments to disk after every change."""

    # Sessions
    session_history_limit: int = 50
    """Transcript turns kept per session."""

    session_ttl_seconds: int = 3600
    """Idle time after which a session is dropped. 0 keeps sessions forever."""

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Split cors_origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def storage_path(self) -> Path:
        """Full path of the appointment file."""
        return Path(self.storage_dir) / f"{self.storage_key}.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from callflow.config import get_settings
        >>> get_settings().conflict_window_minutes
        45
    """
    return Settings()


# Module-level settings instance for easy imports
settings = get_settings()
