"""Key-value stores holding one JSON blob per key."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from medprompt.core.storage.database import DatabaseError, SettingsDatabase

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """The storage seam the settings repository depends on."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class InMemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self._data.get(key)

    def save(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteKeyValueStore:
    """Store backed by the ``kv_store`` table of a ``SettingsDatabase``."""

    def __init__(self, database: SettingsDatabase) -> None:
        self._db = database

    def load(self, key: str) -> str | None:
        row = self._db.connection.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def save(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                  updated_at = excluded.updated_at""",
                (key, value, now),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise DatabaseError(f"Failed to save key {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        conn = self._db.connection
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()

    def keys(self) -> list[str]:
        rows = self._db.connection.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [row["key"] for row in rows]
