"""
Configuration Management for the Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger engine itself takes no configuration: window semantics and
the "Other" label are fixed behavior, not settings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from expense_ledger.models.expense import TimeWindow


class StorageSettings(BaseSettings):
    """SQLite record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    path: str = Field(
        default="expenses.db",
        description="Path to the SQLite database file"
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """The parent directory must exist; the file is created on first use."""
        if v != ":memory:" and not Path(v).expanduser().parent.exists():
            raise ValueError(f"Directory for database file does not exist: {v}")
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
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown in front of amounts (display only)"
    )
    default_time_window: TimeWindow = Field(
        default=TimeWindow.ALL,
        description="Time window selected when the screen opens"
    )


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
