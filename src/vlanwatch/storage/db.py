"""SQLite key-value store for whole-value JSON documents."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from vlanwatch.client.errors import VlanWatchStorageError

logger = logging.getLogger(__name__)


class KeyValueDatabase:
    """One ``kv`` table mapping a key to a JSON document.

    Every write replaces the whole value; there is no partial update.

    Args:
        path: SQLite file path (parent directories are created).
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            conn = sqlite3.connect(str(self.path), timeout=30, isolation_level=None)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode = WAL;")
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv ("
                "key TEXT PRIMARY KEY, "
                "value TEXT NOT NULL, "
                "updated_at_utc TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"
                ");"
            )
            self._conn = conn
        return self._conn

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded document stored under *key*, or *default*.

        Raises:
            VlanWatchStorageError: If the stored value is not valid JSON.
        """
        row = self.connect().execute("SELECT value FROM kv WHERE key=?;", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise VlanWatchStorageError(f"Corrupt value for {key!r}: {exc}") from exc

    def put(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        self.connect().execute(
            "INSERT INTO kv(key, value, updated_at_utc) VALUES (?, ?, CURRENT_TIMESTAMP) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
            "updated_at_utc=excluded.updated_at_utc;",
            (key, payload),
        )
        logger.debug("Stored %s (%d bytes)", key, len(payload))

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
