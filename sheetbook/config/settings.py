"""
Configuration Management for Sheetbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Which storage backend is used (in-memory, local SQLite or Google Sheets)
is a deployment choice, so it lives here rather than in the code paths
that read and write sheets.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackend(str, Enum):
    """Where sheets are persisted."""
    MEMORY = "memory"
    LOCAL = "local"     # SQLite file on the device
    REMOTE = "remote"   # Google Sheets, one worksheet per user


SUPPORTED_CURRENCIES = ("NGN", "USD", "EUR", "GBP")


class LocalStoreSettings(BaseSettings):
    """On-device key-value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SHEETBOOK_LOCAL_",
        extra="ignore"
    )

    db_path: Path = Field(
        default=Path.home() / ".sheetbook" / "store.db",
        description="Path to the SQLite file backing the key-value store"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets (remote backend) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Each user gets their own worksheet: "<prefix><user_id>"
    worksheet_prefix: str = Field(
        default="users_",
        description="Prefix for per-user worksheet names"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
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
    log_level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )

    storage_backend: StorageBackend = Field(
        default=StorageBackend.LOCAL,
        description="Which key-value store backs the sheet repositories"
    )

    # Sheet defaults
    default_currency: str = Field(
        default="NGN",
        description="Currency code used when the user has not picked one"
    )
    default_low_stock_threshold: Decimal = Field(
        default=Decimal("5"),
        ge=0,
        description="Low stock threshold pre-filled on new products"
    )

    @field_validator('default_currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Only currencies we have a symbol for."""
        code = v.strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Unsupported currency: {v}. Allowed: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        return code

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()


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

    # Sub-settings are loaded lazily so a local-only install
    # does not need Google credentials configured.

    @property
    def local_store(self) -> LocalStoreSettings:
        return LocalStoreSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    try:
        _ = settings.local_store
        results["local_store"] = True
    except Exception as e:
        results["local_store"] = False
        results["local_store_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    return results
