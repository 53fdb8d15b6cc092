"""Configuration package."""

from cost_manager.config.settings import (
    DEFAULT_RATES_URL,
    AppSettings,
    RatesSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_RATES_URL",
    "AppSettings",
    "RatesSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
