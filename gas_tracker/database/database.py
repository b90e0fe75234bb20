"""SQLite key/value store with persistent connection"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from gas_tracker.core.logger import logger


class Database:
    def __init__(self, db_path: str = "gas_tracker.db"):
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    async def _get_db(self) -> aiosqlite.Connection:
        """Get or create a persistent database connection"""
        if self._connection is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute("PRAGMA synchronous=NORMAL")
            logger.debug("Database connection established")
        return self._connection

    async def close(self):
        """Close the persistent connection"""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.debug("Database connection closed")

    async def init_db(self):
        """Initialize database schema"""
        db = await self._get_db()

        await db.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL NOT NULL
            )
        """)

        await db.commit()
        logger.debug("Database initialized")

    async def get(self, key: str) -> str | None:
        """Read a raw value, None when the key was never written"""
        db = await self._get_db()
        cursor = await db.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = await cursor.fetchone()
        return row["value"] if row else None

    async def set(self, key: str, value: str):
        """Insert or overwrite a value"""
        db = await self._get_db()
        await db.execute(
            """INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                              updated_at = excluded.updated_at""",
            (key, value, datetime.now().timestamp()),
        )
        await db.commit()

    async def delete(self, key: str):
        db = await self._get_db()
        await db.execute("DELETE FROM kv WHERE key = ?", (key,))
        await db.commit()

    async def keys(self, prefix: str = "") -> list[str]:
        """List stored keys, optionally restricted to a prefix"""
        db = await self._get_db()
        cursor = await db.execute(
            "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        )
        rows = await cursor.fetchall()
        return [row["key"] for row in rows]
