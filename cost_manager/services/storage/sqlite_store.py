"""
SQLite Cost Store

DESIGN DECISION: SQLite is used as the durable backend because:
1. No server to run for a single-user app
2. Transactions give us atomic appends
3. AUTOINCREMENT ids never repeat, even across restarts

All connection access goes through one asyncio.Lock and the blocking
sqlite3 calls run in a worker thread, so the event loop stays free
while appends remain serialized for id assignment.
"""

import asyncio
import sqlite3
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from cost_manager.config import get_settings
from cost_manager.errors import StorageUnavailable
from cost_manager.log import get_logger
from cost_manager.models.cost import CostEntry, CreatedDate, NewCostEntry
from cost_manager.services.storage.interface import CostStorageInterface


COSTS_TABLE = "costs"

CREATE_COSTS_TABLE = f"""
CREATE TABLE IF NOT EXISTS {COSTS_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sum TEXT NOT NULL,
    currency TEXT NOT NULL,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    year INTEGER NOT NULL,
    month INTEGER NOT NULL,
    day INTEGER NOT NULL
)
"""

INSERT_COST = f"""
INSERT INTO {COSTS_TABLE} (sum, currency, category, description, year, month, day)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""

SELECT_ALL_COSTS = f"""
SELECT id, sum, currency, category, description, year, month, day
FROM {COSTS_TABLE}
ORDER BY id ASC
"""


class SQLiteCostStore(CostStorageInterface):
    """
    SQLite implementation of the cost store.

    One row per entry. `sum` is stored as the decimal string so amounts
    round-trip exactly.
    """

    def __init__(
        self,
        database_path: Optional[str] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            database_path: SQLite file (or ":memory:"). Defaults to
                           StorageSettings.database_path.
            clock: Returns today's date; injectable for tests.
        """
        self._path = database_path or get_settings().storage.database_path
        self._clock = clock or date.today
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _connect(self) -> sqlite3.Connection:
        """Open the connection and make sure the schema exists."""
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                conn.execute(CREATE_COSTS_TABLE)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageUnavailable("Cost store is not open")
        return self._conn

    @staticmethod
    def _insert(conn: sqlite3.Connection, new: NewCostEntry, created: date) -> int:
        with conn:
            cursor = conn.execute(
                INSERT_COST,
                (
                    str(new.sum),
                    new.currency,
                    new.category,
                    new.description,
                    created.year,
                    created.month,
                    created.day,
                ),
            )
        return cursor.lastrowid

    @staticmethod
    def _select_all(conn: sqlite3.Connection) -> list[sqlite3.Row]:
        return conn.execute(SELECT_ALL_COSTS).fetchall()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> CostEntry:
        return CostEntry(
            id=row["id"],
            sum=Decimal(row["sum"]),
            currency=row["currency"],
            category=row["category"],
            description=row["description"],
            created_date=CreatedDate(
                year=row["year"],
                month=row["month"],
                day=row["day"],
            ),
        )

    async def open(self) -> None:
        async with self._lock:
            if self._conn is not None:
                return
            try:
                self._conn = await asyncio.to_thread(self._connect)
            except (sqlite3.Error, OSError) as e:
                raise StorageUnavailable(
                    f"Failed to open cost store at {self._path}: {e}"
                ) from e
        self._logger.info("cost_store_opened", path=self._path)

    async def close(self) -> None:
        async with self._lock:
            if self._conn is None:
                return
            conn, self._conn = self._conn, None
            await asyncio.to_thread(conn.close)
        self._logger.info("cost_store_closed", path=self._path)

    async def append(self, fields: Mapping[str, Any]) -> CostEntry:
        new = NewCostEntry.create(fields)

        async with self._lock:
            conn = self._require_open()
            created = self._clock()
            try:
                entry_id = await asyncio.to_thread(self._insert, conn, new, created)
            except sqlite3.Error as e:
                raise StorageUnavailable(f"Failed to append cost: {e}") from e

        entry = CostEntry.from_new(entry_id, new, created)
        self._logger.info(
            "cost_appended",
            entry_id=entry.id,
            currency=entry.currency,
            category=entry.category,
        )
        return entry

    async def list_all(self) -> list[CostEntry]:
        async with self._lock:
            conn = self._require_open()
            try:
                rows = await asyncio.to_thread(self._select_all, conn)
            except sqlite3.Error as e:
                raise StorageUnavailable(f"Failed to list costs: {e}") from e

        return [self._row_to_entry(row) for row in rows]
