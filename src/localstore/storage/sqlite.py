"""
SQLite key-value storage for localstore.

This module provides a persistent stand-in for browser local storage: a
single SQLite file holding one ``items`` table of string keys and string
values. Each logical table of records is one row, its value the JSON array
written by the cache.

Tables:
    - schema_version: Applied schema version
    - items: key -> serialized value

Why SQLite?
    - Zero configuration (no server needed)
    - Atomic writes of a whole table value
    - Portable single-file format
"""

import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from localstore.errors import StorageConnectionError, StorageReadError, StorageWriteError

# Schema version for migrations
SCHEMA_VERSION = 1

CREATE_TABLES_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);

-- Items table: one serialized value per key
CREATE TABLE IF NOT EXISTS items (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def now_iso() -> str:
    """Get current UTC time in ISO format."""
    return datetime.now(UTC).isoformat()


class SQLiteStorage:
    """
    SQLite-backed key-value store.

    Usage:
        storage = SQLiteStorage("localstore.db")
        storage.set("users", "[]")
        storage.get("users")
        storage.close()

    Or use as context manager:
        with SQLiteStorage("localstore.db") as storage:
            ...
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Open (and create if needed) the database.

        Args:
            db_path: Path to the SQLite database file, or ":memory:"
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._connect()
        self._init_schema()

    def _connect(self) -> None:
        """Establish database connection."""
        try:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            raise StorageConnectionError(
                db_path=str(self.db_path),
                operation="connect",
                message=f"Failed to connect to database: {e}",
            ) from e

    def _init_schema(self) -> None:
        """Initialize database schema if needed."""
        try:
            cursor = self._conn.executescript(CREATE_TABLES_SQL)
            cursor.close()

            cursor = self._conn.execute(
                "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
            )
            if cursor.fetchone() is None:
                self._conn.execute(
                    "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                    (SCHEMA_VERSION, now_iso()),
                )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageWriteError(
                operation="init_schema",
                underlying_error=str(e),
            ) from e

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SQLiteStorage":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()

    # =========================================================================
    # Key-value Operations
    # =========================================================================

    def get(self, key: str) -> str | None:
        """
        Get the value stored under a key.

        Args:
            key: The key to look up

        Returns:
            The stored string, or None if the key is absent
        """
        try:
            cursor = self._conn.execute(
                "SELECT value FROM items WHERE key = ?",
                (key,),
            )
            row = cursor.fetchone()
            return row["value"] if row is not None else None
        except sqlite3.Error as e:
            raise StorageReadError(
                operation="get",
                underlying_error=str(e),
            ) from e

    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The key to write
            value: The serialized value
        """
        try:
            self._conn.execute(
                """
                INSERT INTO items (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now_iso()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageWriteError(
                operation="set",
                underlying_error=str(e),
            ) from e

    def keys(self) -> list[str]:
        """List all stored keys, sorted."""
        try:
            cursor = self._conn.execute("SELECT key FROM items ORDER BY key")
            return [row["key"] for row in cursor]
        except sqlite3.Error as e:
            raise StorageReadError(
                operation="keys",
                underlying_error=str(e),
            ) from e
