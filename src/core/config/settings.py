# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the school
records service. Settings are loaded from environment variables with
sensible defaults.

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


class DatabaseSettings(BaseSettings):
    """Records database configuration.

    The records database stores students, teachers, courses, enrollments
    and the read-only user directory they link to.

    Attributes:
        driver: SQLAlchemy async driver name.
        user: Database username.
        password: Database password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full connection URL, used verbatim when set.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Echo SQL statements to the log.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
        populate_by_name=True,
    )

    driver: str = "postgresql+asyncpg"
    user: str = "athena"
    password: SecretStr = SecretStr("athena_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "athena_records"
    url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
    )
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"{self.driver}://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured URL targets SQLite."""
        return self.url.startswith("sqlite")


class RecordsSettings(BaseSettings):
    """Student and teacher record policies.

    Attributes:
        teacher_course_policy: What happens to a teacher's courses when the
            teacher is deleted. ``orphan`` keeps the courses with no
            instructor, ``restrict`` refuses the deletion while courses remain.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECORDS_",
        extra="ignore",
    )

    teacher_course_policy: Literal["orphan", "restrict"] = "orphan"


class DashboardSettings(BaseSettings):
    """Dashboard statistics configuration.

    Attributes:
        recent_activity_limit: Maximum number of merged recent activities.
        recent_enrollment_limit: Enrollment events fetched before merging.
        recent_completion_limit: Completion events fetched before merging.
        recent_course_limit: Course-created events fetched before merging.
        grade_precision: Decimal places kept on the average grade.
    """

    model_config = SettingsConfigDict(
        env_prefix="DASHBOARD_",
        extra="ignore",
    )

    recent_activity_limit: int = Field(default=10, ge=1)
    recent_enrollment_limit: int = Field(default=5, ge=0)
    recent_completion_limit: int = Field(default=5, ge=0)
    recent_course_limit: int = Field(default=3, ge=0)
    grade_precision: int = Field(default=1, ge=0)


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Records database settings.
        records: Record policy settings.
        dashboard: Dashboard statistics settings.
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
    records: RecordsSettings = Field(default_factory=RecordsSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "Debug mode must be disabled in production. Set DEBUG=false."
                )
            if (
                self.database.url_override is None
                and self.database.password.get_secret_value() == "athena_password"
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
