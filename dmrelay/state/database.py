"""Database connection and lifecycle management."""
import aiosqlite
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator


class DatabaseError(Exception):
    pass


class DatabaseManager:
    """Manages SQLite database connections and schema initialization."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._initialized = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create tables and indexes."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self.connection() as conn:
            await conn.executescript(_SCHEMA)
            await conn.commit()
        self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield an async database connection."""
        try:
            conn = await aiosqlite.connect(self._db_path)
        except aiosqlite.Error as e:
            raise DatabaseError(f"Cannot open {self._db_path}: {e}") from e
        conn.row_factory = aiosqlite.Row
        try:
            yield conn
        finally:
            await conn.close()


_SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_versions (version TEXT PRIMARY KEY, applied_at TEXT NOT NULL);
CREATE TABLE IF NOT EXISTS offline_messages (
    seq          INTEGER PRIMARY KEY AUTOINCREMENT,
    namespace    TEXT NOT NULL,
    message_id   TEXT NOT NULL,
    sender_id    TEXT NOT NULL,
    receiver_id  TEXT NOT NULL,
    content      TEXT NOT NULL,
    subject      TEXT NOT NULL DEFAULT '',
    created_at   TEXT NOT NULL,
    queued_at    TEXT NOT NULL,
    UNIQUE (namespace, message_id),
    CHECK(length(content) > 0)
);
CREATE TABLE IF NOT EXISTS client_state (
    namespace   TEXT PRIMARY KEY,
    local_mode  INTEGER NOT NULL DEFAULT 0 CHECK(local_mode IN (0, 1)),
    reason      TEXT NOT NULL DEFAULT '',
    updated_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_offline_conversation ON offline_messages(namespace, sender_id, receiver_id);
CREATE INDEX IF NOT EXISTS idx_offline_created ON offline_messages(namespace, created_at);
INSERT OR IGNORE INTO schema_versions (version, applied_at) VALUES ('1.0.0', datetime('now'));
"""
