"""
Configuration Management for MoneyMind

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, currency defaults and the password policy are the only
knobs the application has, and they are all validated at startup.
"""

import re
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local JSON storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONEYMIND_STORAGE_",
        extra="ignore"
    )

    data_path: Path = Field(
        default=Path("data/moneymind.json"),
        description="Path of the JSON file holding the user database"
    )
    database_key: str = Field(
        default="MoneyMindDB_v7",
        min_length=1,
        description="Versioned key the database record is stored under"
    )


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
        description="Show the recent audit trail in the sidebar"
    )

    # Money
    default_currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="Currency assigned to newly registered users"
    )
    supported_currencies: str = Field(
        default="INR,USD,EUR,GBP,JPY",
        description="Comma-separated list of selectable currencies"
    )

    # Presentation
    recent_transactions_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many transactions the recent list shows"
    )

    # Authentication
    password_pattern: str = Field(
        default=r"^(?=.*[A-Z])(?=.*\d).{8,}$",
        description="Regex a new password must match"
    )

    @field_validator('password_pattern')
    @classmethod
    def validate_password_pattern(cls, v: str) -> str:
        """Fail at startup rather than at the first registration."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid password pattern: {e}")
        return v

    @property
    def supported_currencies_list(self) -> list[str]:
        """Get supported currencies as a list."""
        return [c.strip().upper() for c in self.supported_currencies.split(",") if c.strip()]


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

    Returns a dict of {setting_name: is_valid}, with a `<name>_error`
    entry for each section that failed.
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
