"""
SQLite implementation of the Scriptorium workspace store.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from pathlib import Path

from scriptorium.stores.base import BaseStore, StorageError, StoredValue


class SQLiteStore(BaseStore):
    """SQLite-based versioned key-value storage for workspace trees."""

    def __init__(self, db_path: str | None = None):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file. None for in-memory database.
        """
        self.db_path = db_path or ":memory:"
        self.conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Open the connection and create the schema."""
        if self.conn is not None:
            return
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self._create_tables()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Failed to open store at {self.db_path}: {e}") from e

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        assert self.conn is not None

        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS vfs_state (
                key TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                version INTEGER NOT NULL DEFAULT 1,
                updated_at REAL NOT NULL
            )
        """)
        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            self.initialize()
        assert self.conn is not None
        return self.conn

    def get(self, key: str) -> StoredValue | None:
        with self._lock:
            try:
                cursor = self._connection().cursor()
                cursor.execute(
                    "SELECT data, version FROM vfs_state WHERE key = ?", (key,)
                )
                row = cursor.fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to read {key}: {e}") from e

        if row is None:
            return None
        return StoredValue(data=row["data"], version=row["version"])

    def set(self, key: str, data: str) -> int:
        with self._lock:
            conn = self._connection()
            try:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO vfs_state (key, data, version, updated_at)
                    VALUES (?, ?, 1, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        data = excluded.data,
                        version = vfs_state.version + 1,
                        updated_at = excluded.updated_at
                    """,
                    (key, data, time.time()),
                )
                cursor.execute("SELECT version FROM vfs_state WHERE key = ?", (key,))
                version = cursor.fetchone()["version"]
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(f"Failed to write {key}: {e}") from e
        return version

    def compare_and_swap(self, key: str, data: str, expected_version: int) -> bool:
        with self._lock:
            conn = self._connection()
            try:
                cursor = conn.cursor()
                if expected_version == 0:
                    cursor.execute(
                        """
                        INSERT OR IGNORE INTO vfs_state (key, data, version, updated_at)
                        VALUES (?, ?, 1, ?)
                        """,
                        (key, data, time.time()),
                    )
                else:
                    cursor.execute(
                        """
                        UPDATE vfs_state
                        SET data = ?, version = version + 1, updated_at = ?
                        WHERE key = ? AND version = ?
                        """,
                        (data, time.time(), key, expected_version),
                    )
                swapped = cursor.rowcount == 1
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(f"Failed to write {key}: {e}") from e
        return swapped

    def delete(self, key: str) -> bool:
        with self._lock:
            conn = self._connection()
            try:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM vfs_state WHERE key = ?", (key,))
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(f"Failed to delete {key}: {e}") from e
        return cursor.rowcount > 0

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            try:
                cursor = self._connection().cursor()
                cursor.execute(
                    "SELECT key FROM vfs_state WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                )
                rows = cursor.fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to list keys: {e}") from e
        return [row["key"] for row in rows]
