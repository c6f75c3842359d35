"""Key-value persistence backed by SQLite, plus an in-memory equivalent."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def get_connection(db_path: str) -> sqlite3.Connection:
    """Get a SQLite connection with WAL mode enabled."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str) -> None:
    """Create all tables and set schema version."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        conn.commit()
    finally:
        conn.close()


class SQLiteStore:
    """get/set/remove over bytes values, one row per key."""

    def __init__(self, db_path: str):
        init_db(db_path)
        self.db_path = db_path
        self.conn = get_connection(db_path)

    def get(self, key: str) -> bytes | None:
        row = self.conn.execute(
            "SELECT value FROM kv WHERE key = ?", (key,),
        ).fetchone()
        return bytes(row["value"]) if row else None

    def set(self, key: str, value: bytes) -> None:
        self.conn.execute(
            """INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET
               value = excluded.value, updated_at = excluded.updated_at""",
            (key, value, datetime.now(timezone.utc).isoformat()),
        )
        self.conn.commit()

    def remove(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()

    def keys(self) -> list[str]:
        rows = self.conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        return [row["key"] for row in rows]

    def close(self) -> None:
        self.conn.close()


class MemoryStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self):
        self.data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self.data)

    def close(self) -> None:
        pass
