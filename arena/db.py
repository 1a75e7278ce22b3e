"""
arena/db.py - SQLite storage for the league server.

ArenaDB is a byte-keyed key-value store (the Storage interface from
leagues.store) on a single SQLite table. One instance per server lifetime,
backed by a single SQLite file (or :memory: for tests).
"""

import sqlite3
from typing import Iterator


class ArenaDB:
    """Thin wrapper around SQLite for league storage."""

    def __init__(self, path: str = "leagues.db"):
        self.path = path
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key BLOB PRIMARY KEY,
                value BLOB NOT NULL
            );
            """
        )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def get(self, key: bytes) -> bytes | None:
        row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return bytes(row[0]) if row else None

    def put(self, key: bytes, value: bytes) -> None:
        self._conn.execute(
            "INSERT INTO kv (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )
        self._conn.commit()

    def remove(self, key: bytes) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()

    def iter_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """(key, value) pairs whose key starts with prefix, ordered by key."""
        rows = self._conn.execute(
            "SELECT key, value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        ).fetchall()
        for key, value in rows:
            yield bytes(key), bytes(value)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def key_count(self) -> int:
        """Number of stored keys."""
        return self._conn.execute("SELECT COUNT(*) FROM kv").fetchone()[0]

    def close(self) -> None:
        self._conn.close()
