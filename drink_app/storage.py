"""Key-value storage for persisted JSON blobs (drink log, profile, catalog cache)."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DRINKS_KEY = "SavedDrinks"
PROFILE_KEY = "UserProfile"
CATALOG_CACHE_KEY = "CachedPopularDrinks"
CATALOG_UPDATED_KEY = "LastDrinksUpdate"


class StorageError(Exception):
    """Storage could not be read, written or cleared."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None:
        """Return the decoded JSON value for key, or None if missing or unreadable.

        Raises StorageError when the backend itself fails.
        """

    def set(self, key: str, value: Any) -> None:
        """Encode value as JSON and store it. Raises StorageError on failure."""

    def delete(self, key: str) -> None:
        """Remove key if present."""


def _encode(key: str, value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=True)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Could not encode value for {key!r}: {exc}") from exc


def _decode(key: str, raw: str | None) -> Any | None:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable stored value for %s", key)
        return None


def init_db(db_path: str) -> None:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )
        conn.commit()


class SqliteKeyValueStore:
    """SQLite-backed store; one row per key."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        init_db(db_path)

    def get(self, key: str) -> Any | None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute("SELECT value_json FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read {key!r}: {exc}") from exc
        return _decode(key, row[0] if row else None)

    def set(self, key: str, value: Any) -> None:
        value_json = _encode(key, value)
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value_json, updated_at)
                    VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET value_json = excluded.value_json, updated_at = excluded.updated_at
                    """,
                    (key, value_json),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not save {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not delete {key!r}: {exc}") from exc


class MemoryKeyValueStore:
    """Process-local store. Values are kept JSON-encoded so they behave like the SQLite store."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        return _decode(key, self._values.get(key))

    def set(self, key: str, value: Any) -> None:
        self._values[key] = _encode(key, value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
