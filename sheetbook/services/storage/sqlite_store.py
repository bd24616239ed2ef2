"""
SQLite Key-Value Store

The local, on-device backend: a single `kv` table in a SQLite file.

TRADEOFFS:
- One connection per instance, no pooling (single user, single session)
- Each set/remove commits immediately; the repository's index write
  and record write are still two separate commits
"""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from sheetbook.log import get_logger
from sheetbook.services.storage.interface import (
    KeyValueStoreInterface,
    StoreReadError,
    StoreWriteError,
)


logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class SqliteKeyValueStore(KeyValueStoreInterface):
    """Key-value store persisted in a SQLite database file."""

    def __init__(self, db_path: Union[str, Path]):
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self._db_path)
        with self._conn:
            self._conn.execute(SCHEMA)

    async def get(self, key: str) -> Optional[str]:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreReadError(f"Failed to read {key!r}: {e}") from e
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as e:
            logger.error("kv_write_failed", key=key, error=str(e))
            raise StoreWriteError(f"Failed to write {key!r}: {e}") from e

    async def remove(self, key: str) -> None:
        try:
            with self._conn:
                self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as e:
            logger.error("kv_remove_failed", key=key, error=str(e))
            raise StoreWriteError(f"Failed to remove {key!r}: {e}") from e

    def close(self) -> None:
        self._conn.close()
