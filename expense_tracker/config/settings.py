"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location and store behaviour are validated once at startup
instead of being read ad hoc by each component.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """On-device key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' (durable) or 'memory' (ephemeral)"
    )
    data_dir: Path = Field(
        default=Path.home() / ".expense_tracker",
        description="Directory holding one JSON file per storage key"
    )
    expenses_key: str = Field(
        default="expenses",
        min_length=1,
        description="Storage key for the expense collection"
    )

    # Retry policy for transient file system errors
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per storage read/write before giving up"
    )
    retry_wait_seconds: float = Field(
        default=0.1,
        ge=0.0,
        le=10.0,
        description="Base wait for exponential backoff between attempts"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator('expenses_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid storage key: {v!r}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        min_length=1,
        max_length=5,
        description="Symbol prefixed to formatted amounts"
    )

    # Store behaviour
    rollback_on_write_failure: bool = Field(
        default=True,
        description="Undo the in-memory change when persisting it fails"
    )

    # Validation thresholds
    max_expense_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable amount (for sanity checking)"
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

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for each section that failed.
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
