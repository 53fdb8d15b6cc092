"""
Configuration Management for Cost Manager

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All deployment configuration is centralized here.
The user-editable rates source lives in the settings store instead
(see services.settings) because the user changes it at runtime.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_RATES_URL = "https://oranlevii.github.io/cost-manager-rates/rates.json"


class StorageSettings(BaseSettings):
    """Local storage locations."""

    model_config = SettingsConfigDict(
        env_prefix="COST_MANAGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_path: str = Field(
        default="cost_manager.db",
        description="Path to the SQLite database holding cost entries"
    )
    settings_path: str = Field(
        default="cost_manager_settings.json",
        description="Path to the JSON file holding user settings"
    )


class RatesSettings(BaseSettings):
    """Exchange-rate source configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COST_MANAGER_RATES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_url: str = Field(
        default=DEFAULT_RATES_URL,
        description="Rates source used when the user configured none"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="HTTP timeout for a single rates request"
    )
    # 1 means no retries
    fetch_attempts: int = Field(
        default=1,
        ge=1,
        le=5,
        description="Attempts per fetch on transport errors"
    )

    @field_validator('default_url')
    @classmethod
    def validate_default_url(cls, v: str) -> str:
        """The built-in default must always be usable."""
        v = v.strip()
        if not v:
            raise ValueError("default_url cannot be blank")
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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (console log rendering)"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON lines"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def rates(self) -> RatesSettings:
        return RatesSettings()

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
    `<name>_error` entry for each section that failed to load.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "rates", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
