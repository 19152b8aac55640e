"""
Configuration Management for the Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The database location is the only external dependency, and it is
validated before the first command runs.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSES_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="postgresql+psycopg2:///expenses",
        description="SQLAlchemy database URL"
    )
    echo: bool = Field(
        default=False,
        description="Echo every SQL statement to the log"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject values that are obviously not database URLs."""
        if "://" not in v:
            raise ValueError(f"Not a database URL: {v!r}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Minimum level written to stderr"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        """Debug mode always logs everything."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    {setting_name}_error entry for every failure.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.database
        results["database"] = True
    except Exception as e:
        results["database"] = False
        results["database_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
