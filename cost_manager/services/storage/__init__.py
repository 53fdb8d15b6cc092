"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage:
SQLite for cost entries, a JSON file for user settings, and in-memory
variants of both for tests.
"""

from cost_manager.services.storage.interface import (
    CostStorageInterface,
    KeyValueStorageInterface,
)
from cost_manager.services.storage.key_value import JsonFileKeyValueStore
from cost_manager.services.storage.memory import (
    InMemoryCostStore,
    InMemoryKeyValueStore,
)
from cost_manager.services.storage.sqlite_store import SQLiteCostStore

__all__ = [
    # Interfaces
    "CostStorageInterface",
    "KeyValueStorageInterface",
    # Implementations
    "InMemoryCostStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SQLiteCostStore",
]
