"""SQLite-backed key-value slot for the local document store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import config
from invoicegen.errors import PersistenceError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class KeyValueStore:
    """One string value per key, persisted in a single SQLite file."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path or config.DB_PATH)
        self._connection: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode=WAL")
            self._connection.executescript(SCHEMA)
            self._connection.commit()
            logger.info(f"Local store opened at {self.db_path}")
        return self._connection

    def get(self, key: str) -> str | None:
        try:
            row = self.get_connection().execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read '{key}': {e}") from e
        return row["value"] if row else None

    def set(self, key: str, value: str):
        try:
            conn = self.get_connection()
            conn.execute(
                "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write '{key}': {e}") from e

    def delete(self, key: str):
        try:
            conn = self.get_connection()
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete '{key}': {e}") from e

    def close(self):
        if self._connection is not None:
            self._connection.close()
            self._connection = None
