"""
Settings Resolver

Resolves which exchange-rate source the core should use, and persists
the user's choice.

PRECEDENCE (first non-blank wins):
1. `ratesUrl` inside the settings record (key `cm_settings_v1`)
2. The legacy single-value key `ratesUrl`
3. The built-in default (RatesSettings.default_url)

No network access happens here.
"""

import json
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from cost_manager.config import get_settings
from cost_manager.log import get_logger
from cost_manager.models.user_settings import UserSettings
from cost_manager.services.storage.interface import KeyValueStorageInterface


SETTINGS_KEY = "cm_settings_v1"
LEGACY_RATES_URL_KEY = "ratesUrl"


class SettingsResolver:
    """Precedence-ordered resolver/persister of the rates source."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        default_url: Optional[str] = None,
    ):
        self._storage = storage
        self._default_url = default_url or get_settings().rates.default_url
        self._logger = get_logger(__name__)

    @property
    def default_url(self) -> str:
        return self._default_url

    def _read_record(self) -> Optional[UserSettings]:
        """The stored settings record, or None if absent or unreadable."""
        raw = self._storage.get(SETTINGS_KEY)
        if not raw:
            return None
        try:
            return UserSettings.model_validate(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            # A broken record falls through to the next source
            self._logger.warning("settings_record_unreadable", key=SETTINGS_KEY, error=str(e))
            return None

    def load(self) -> UserSettings:
        """The stored record merged over defaults."""
        return self._read_record() or UserSettings()

    def resolve(self) -> str:
        """Return the rates source URL to use right now."""
        record = self._read_record()
        if record is not None and record.rates_url.strip():
            return record.rates_url.strip()

        legacy = self._storage.get(LEGACY_RATES_URL_KEY)
        if legacy and legacy.strip():
            return legacy.strip()

        return self._default_url

    def save(self, settings: UserSettings) -> None:
        """
        Persist the settings record and mirror `ratesUrl` into the
        legacy key for readers that only know that key.
        """
        trimmed = settings.model_copy(update={"rates_url": settings.rates_url.strip()})
        self._storage.set(SETTINGS_KEY, trimmed.to_record())
        self._storage.set(LEGACY_RATES_URL_KEY, trimmed.rates_url)
        self._logger.info(
            "settings_saved",
            rates_url=trimmed.rates_url or None,
            resolved=self.resolve(),
        )
