"""Application settings and configuration.

This module defines all configuration options for the Pixel Canvas application.
Settings are loaded from environment variables with sensible defaults.
"""

from datetime import timedelta
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Pixel Canvas", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./pixels.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")
    sqlite_busy_timeout_seconds: float = Field(
        default=30.0, alias="SQLITE_BUSY_TIMEOUT_SECONDS"
    )

    # Grid and quota rules
    grid_size: int = Field(default=200, gt=0, alias="GRID_SIZE")
    max_pixels_per_day: int = Field(default=10, ge=1, alias="MAX_PIXELS_PER_DAY")
    adjacency_scope: Literal["grid", "own"] = Field(default="grid", alias="ADJACENCY_SCOPE")
    default_color: str = Field(default="#000000", alias="DEFAULT_COLOR")

    # Loopback visitors (local development) are not limited
    exempt_loopback: bool = Field(default=True, alias="EXEMPT_LOOPBACK")
    exempt_display_limit: int = Field(default=999, alias="EXEMPT_DISPLAY_LIMIT")

    # Session idle expiry and the background lock sweep
    session_duration_seconds: int = Field(default=30 * 60, gt=0, alias="SESSION_DURATION_SECONDS")
    lock_sweep_interval_seconds: float = Field(default=60.0, alias="LOCK_SWEEP_INTERVAL_SECONDS")
    lock_sweeper_enabled: bool = Field(default=True, alias="LOCK_SWEEPER_ENABLED")

    # Identity transport
    session_cookie_name: str = Field(default="pixel_session", alias="SESSION_COOKIE_NAME")
    trust_proxy: bool = Field(default=True, alias="TRUST_PROXY")

    # Recent visitors log
    recent_visitors_max: int = Field(default=50, alias="RECENT_VISITORS_MAX")
    recent_visitors_seen_max: int = Field(default=500, alias="RECENT_VISITORS_SEEN_MAX")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def session_duration(self) -> timedelta:
        """Return the idle period after which a session's cells are locked."""
        return timedelta(seconds=self.session_duration_seconds)

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts async driver URLs to psycopg for Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()
