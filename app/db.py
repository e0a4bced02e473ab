"""SQLite-backed key/value store for settings and issued token ids.

Values are stored JSON-encoded. All public methods are async and run the
blocking sqlite3 call in a worker thread; sqlite3.Error propagates unchanged.
"""
from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from typing import Any

from .logging_conf import get_logger

logger = get_logger("db")

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jsonwebtokens (
        key_id TEXT PRIMARY KEY,
        user TEXT NOT NULL,
        issued_at INTEGER NOT NULL
    )
    """,
)


class Database:
    """Thin async wrapper around a single sqlite3 connection.

    Usage:
        db = Database("gateway.sqlite3")
        db.open()
        await db.set_setting("localDNSname", "gateway.local")
    """

    def __init__(self, path: str):
        self.path = path
        self._conn: sqlite3.Connection | None = None
        # One connection shared across worker threads; sqlite3 needs the calls serialized.
        self._lock = threading.Lock()

    def open(self) -> None:
        if self._conn is not None:
            return
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._lock:
            for stmt in _SCHEMA:
                self._conn.execute(stmt)
            self._conn.commit()
        logger.info("db.open", extra={"event": "db_open", "path": self.path})

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("db.close", extra={"event": "db_close", "path": self.path})

    # ------------------------
    # Internals
    # ------------------------
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Database is not open")
        return self._conn

    def _execute(self, query: str, params: tuple = ()) -> None:
        with self._lock:
            conn = self._connection()
            conn.execute(query, params)
            conn.commit()

    def _query_one(self, query: str, params: tuple = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._connection().execute(query, params).fetchone()

    # ------------------------
    # Settings
    # ------------------------
    async def get_setting(self, key: str) -> Any:
        """Return the stored value for key, or None if absent."""
        row = await asyncio.to_thread(
            self._query_one, "SELECT value FROM settings WHERE key = ?", (key,)
        )
        if row is None:
            return None
        return json.loads(row["value"])

    async def set_setting(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, encoded),
        )

    async def delete_setting(self, key: str) -> None:
        await asyncio.to_thread(self._execute, "DELETE FROM settings WHERE key = ?", (key,))

    # ------------------------
    # Token ids
    # ------------------------
    async def create_token(self, key_id: str, user: str, issued_at: int) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO jsonwebtokens (key_id, user, issued_at) VALUES (?, ?, ?)",
            (key_id, user, issued_at),
        )

    async def get_token(self, key_id: str) -> dict | None:
        row = await asyncio.to_thread(
            self._query_one,
            "SELECT key_id, user, issued_at FROM jsonwebtokens WHERE key_id = ?",
            (key_id,),
        )
        return dict(row) if row is not None else None

    async def delete_token(self, key_id: str) -> None:
        await asyncio.to_thread(
            self._execute, "DELETE FROM jsonwebtokens WHERE key_id = ?", (key_id,)
        )
