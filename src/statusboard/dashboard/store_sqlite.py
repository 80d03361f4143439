"""SQLite-backed service state store."""

from __future__ import annotations

from datetime import UTC, datetime

import aiosqlite

_CREATE_TABLES = """
CREATE TABLE IF NOT EXISTS services (
    key TEXT PRIMARY KEY,
    last_online_date TEXT,
    position INTEGER,
    deleted INTEGER NOT NULL DEFAULT 0
);
"""


class SqliteServiceStore:
    """Persists last-online dates, row order and deletions to SQLite."""

    def __init__(self, db_path: str = "statusboard.db") -> None:
        self._db_path = db_path
        self._initialized = False

    async def _init_connection(self, db: aiosqlite.Connection) -> None:
        if not self._initialized:
            await db.executescript(_CREATE_TABLES)
            self._initialized = True

    async def record_last_online(self, key: str, when: datetime) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            await db.execute(
                "INSERT INTO services (key, last_online_date) VALUES (?, ?)"
                " ON CONFLICT(key) DO UPDATE SET last_online_date = excluded.last_online_date",
                (key, when.isoformat()),
            )
            await db.commit()

    async def get_last_online(self) -> dict[str, datetime]:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            rows = list(await db.execute_fetchall(
                "SELECT key, last_online_date FROM services"
                " WHERE deleted = 0 AND last_online_date IS NOT NULL"
            ))
            return {str(r[0]): self._parse_dt(str(r[1])) for r in rows}

    async def save_order(self, keys: list[str]) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            await db.execute("UPDATE services SET position = NULL")
            for position, key in enumerate(keys):
                await db.execute(
                    "INSERT INTO services (key, position) VALUES (?, ?)"
                    " ON CONFLICT(key) DO UPDATE SET position = excluded.position",
                    (key, position),
                )
            await db.commit()

    async def get_order(self) -> list[str]:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            rows = list(await db.execute_fetchall(
                "SELECT key FROM services WHERE deleted = 0 AND position IS NOT NULL ORDER BY position"
            ))
            return [str(r[0]) for r in rows]

    async def delete(self, key: str) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            await db.execute(
                "INSERT INTO services (key, deleted) VALUES (?, 1)"
                " ON CONFLICT(key) DO UPDATE SET deleted = 1, position = NULL, last_online_date = NULL",
                (key,),
            )
            await db.commit()

    async def get_deleted(self) -> set[str]:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            rows = list(await db.execute_fetchall("SELECT key FROM services WHERE deleted = 1"))
            return {str(r[0]) for r in rows}

    async def restore(self, key: str) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await self._init_connection(db)
            await db.execute("UPDATE services SET deleted = 0 WHERE key = ?", (key,))
            await db.commit()

    def _parse_dt(self, val: str) -> datetime:
        parsed = datetime.fromisoformat(val)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
