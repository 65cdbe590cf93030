# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the
curriculum progress and assessment engine. Settings are loaded from
environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PASSWORD = "madrasah_password"


class DatabaseSettings(BaseSettings):
    """Record store database configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full connection URL; takes precedence over components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "madrasah"
    password: SecretStr = SecretStr(DEFAULT_DB_PASSWORD)
    host: str = "localhost"
    port: int = 5432
    database: str = "madrasah"
    url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def async_url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL points at SQLite (tests, local tooling)."""
        return self.async_url.startswith("sqlite")


class ProgressSettings(BaseSettings):
    """Curriculum position tracker configuration.

    Attributes:
        default_grade: Grade stored when a session is recorded without one.
        history_limit: Default number of history rows returned.
        max_history_limit: Upper bound on a requested history page.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROGRESS_",
        extra="ignore",
    )

    default_grade: Literal["Excellent", "Good", "Fair", "Poor"] = "Good"
    history_limit: int = Field(default=10, ge=1)
    max_history_limit: int = Field(default=100, ge=1)


class ExamSettings(BaseSettings):
    """Exam ranker configuration.

    Attributes:
        max_score_limit: Largest allowed max score for an exam batch.
        ranking_precision: Decimal places used when comparing percentages.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXAM_",
        extra="ignore",
    )

    max_score_limit: int = Field(default=1000, gt=0)
    ranking_precision: int = Field(default=2, ge=0, le=6)


class CalendarSettings(BaseSettings):
    """School calendar configuration.

    Attributes:
        timezone: IANA zone of the school, used to compute "today".
        enforce_instructional_days: Reject attendance on non-school days
            instead of only warning.
    """

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_",
        extra="ignore",
    )

    timezone: str = "UTC"
    enforce_instructional_days: bool = False


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Server bind address.
        port: Server port.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Record store settings.
        progress: Position tracker settings.
        exam: Exam ranker settings.
        calendar: Calendar resolver settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    progress: ProgressSettings = Field(default_factory=ProgressSettings)
    exam: ExamSettings = Field(default_factory=ExamSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if (
                self.database.url_override is None
                and self.database.password.get_secret_value() == DEFAULT_DB_PASSWORD
            ):
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
