"""Settings services package."""

from cost_manager.services.settings.resolver import (
    LEGACY_RATES_URL_KEY,
    SETTINGS_KEY,
    SettingsResolver,
)

__all__ = [
    "LEGACY_RATES_URL_KEY",
    "SETTINGS_KEY",
    "SettingsResolver",
]
