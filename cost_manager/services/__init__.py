"""Services package."""

from cost_manager.services.rates import RatesCache, RatesClient, parse_rates_table
from cost_manager.services.settings import SettingsResolver
from cost_manager.services.storage import (
    CostStorageInterface,
    InMemoryCostStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStorageInterface,
    SQLiteCostStore,
)

__all__ = [
    # Rates
    "RatesCache",
    "RatesClient",
    "parse_rates_table",
    # Settings
    "SettingsResolver",
    # Storage
    "CostStorageInterface",
    "InMemoryCostStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStorageInterface",
    "SQLiteCostStore",
]
