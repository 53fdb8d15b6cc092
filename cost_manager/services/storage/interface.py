"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Use SQLite on disk in production
2. Use in-memory storage for testing
3. Keep the report logic decoupled from the storage implementation

The cost interface is intentionally tiny: entries are append-only,
so there is no update, delete or query surface.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional

from cost_manager.models.cost import CostEntry


class CostStorageInterface(ABC):
    """
    Abstract interface for the cost entry store.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def open(self) -> None:
        """
        Open the store, creating the schema if needed.

        Idempotent: calling it on an open store does nothing.

        Raises:
            StorageUnavailable: If the medium cannot be opened
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying resources. The store becomes unavailable."""
        pass

    @abstractmethod
    async def append(self, fields: Mapping[str, Any]) -> CostEntry:
        """
        Validate and persist a new cost entry.

        Args:
            fields: sum, currency, category and description

        Returns:
            The stored entry with its assigned id and created date

        Raises:
            ValidationError: If a field is invalid
            StorageUnavailable: If the store is not open or the write fails
        """
        pass

    @abstractmethod
    async def list_all(self) -> list[CostEntry]:
        """
        Return every stored entry, ascending by id.

        Re-read on every call; never cached.

        Raises:
            StorageUnavailable: If the store is not open or the read fails
        """
        pass


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for the small string key/value store that
    holds user settings.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for `key`, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key` if present."""
        pass
