"""
In-Memory Storage

Non-durable implementations of the storage interfaces, used by tests
and by storage-less runs (create_app_components(use_storage=False)).
"""

import asyncio
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any, Optional

from cost_manager.errors import StorageUnavailable
from cost_manager.models.cost import CostEntry, NewCostEntry
from cost_manager.services.storage.interface import (
    CostStorageInterface,
    KeyValueStorageInterface,
)


class InMemoryCostStore(CostStorageInterface):
    """Cost store backed by a list. Same contract as SQLiteCostStore."""

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        self._clock = clock or date.today
        self._entries: list[CostEntry] = []
        self._last_id = 0
        self._open = False
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        self._open = True

    async def close(self) -> None:
        self._open = False

    async def append(self, fields: Mapping[str, Any]) -> CostEntry:
        new = NewCostEntry.create(fields)
        async with self._lock:
            if not self._open:
                raise StorageUnavailable("Cost store is not open")
            self._last_id += 1
            entry = CostEntry.from_new(self._last_id, new, self._clock())
            self._entries.append(entry)
        return entry

    async def list_all(self) -> list[CostEntry]:
        if not self._open:
            raise StorageUnavailable("Cost store is not open")
        return list(self._entries)


class InMemoryKeyValueStore(KeyValueStorageInterface):
    """Dict-backed key/value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
