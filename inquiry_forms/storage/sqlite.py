"""SQLite repository backend.

One table of whole JSON snapshots keyed by opaque strings.
"""

import json
import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from inquiry_forms.errors import StorageError

logger = logging.getLogger(__name__)

# SQL Schema
SCHEMA_SQL = """
-- Snapshot records
CREATE TABLE IF NOT EXISTS records (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,  -- JSON object
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class SQLiteRepository:
    """SQLite-based repository implementation.

    Example:
        >>> repo = SQLiteRepository(Path(".inquiry-forms/forms.db"))
        >>> repo.initialize()
        >>> repo.create("form:abc", {"id": "abc"})
        >>> repo.close()
    """

    def __init__(self, db_path: Path | str):
        """Initialize SQLite repository.

        Args:
            db_path: Path to SQLite database file (":memory:" for a
                private in-memory database).
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection."""
        if self._conn is None:
            raise RuntimeError("Storage not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Initialize storage (create database file, tables)."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if isinstance(self.db_path, Path):
            self._conn.execute("PRAGMA journal_mode = WAL")

        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

        logger.info(f"Initialized SQLite storage at {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    # =========================================================================
    # Record Operations
    # =========================================================================

    def create(self, key: str, value: dict[str, Any]) -> None:
        """Store a new record."""
        conn = self._get_conn()
        now = datetime.now(UTC).isoformat()
        try:
            conn.execute(
                "INSERT INTO records (key, value, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (key, json.dumps(value), now, now),
            )
        except sqlite3.IntegrityError as e:
            raise StorageError(f"Record already exists: {key}") from e
        conn.commit()
        logger.debug("Created record %s", key)

    def read(self, key: str) -> dict[str, Any] | None:
        """Get a record by key."""
        conn = self._get_conn()
        row = conn.execute("SELECT value FROM records WHERE key = ?", (key,)).fetchone()
        if row:
            return json.loads(row["value"])
        return None

    def update(self, key: str, value: dict[str, Any]) -> None:
        """Replace an existing record."""
        conn = self._get_conn()
        cursor = conn.execute(
            "UPDATE records SET value = ?, updated_at = ? WHERE key = ?",
            (json.dumps(value), datetime.now(UTC).isoformat(), key),
        )
        if cursor.rowcount == 0:
            raise StorageError(f"Record not found: {key}")
        conn.commit()
        logger.debug("Updated record %s", key)

    def delete(self, key: str) -> None:
        """Remove a record."""
        conn = self._get_conn()
        cursor = conn.execute("DELETE FROM records WHERE key = ?", (key,))
        if cursor.rowcount == 0:
            raise StorageError(f"Record not found: {key}")
        conn.commit()
        logger.debug("Deleted record %s", key)

    def list_keys(self, prefix: str = "") -> list[str]:
        """List keys starting with ``prefix``."""
        conn = self._get_conn()
        # substr avoids LIKE wildcards in user-chosen prefixes
        rows = conn.execute(
            "SELECT key FROM records WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        ).fetchall()
        return [row["key"] for row in rows]
