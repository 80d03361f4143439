"""Persistence protocol for service state and an in-memory implementation."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from statusboard.config.models import StatusboardConfig


@runtime_checkable
class ServiceStore(Protocol):
    """Protocol for service state backends."""

    async def record_last_online(self, key: str, when: datetime) -> None: ...
    async def get_last_online(self) -> dict[str, datetime]: ...
    async def save_order(self, keys: list[str]) -> None: ...
    async def get_order(self) -> list[str]: ...
    async def delete(self, key: str) -> None: ...
    async def get_deleted(self) -> set[str]: ...
    async def restore(self, key: str) -> None: ...


class InMemoryServiceStore:
    """In-memory service state. Safe across tasks via an asyncio lock."""

    def __init__(self) -> None:
        self._last_online: dict[str, datetime] = {}
        self._order: list[str] = []
        self._deleted: set[str] = set()
        self._lock = asyncio.Lock()

    async def record_last_online(self, key: str, when: datetime) -> None:
        async with self._lock:
            self._last_online[key] = when

    async def get_last_online(self) -> dict[str, datetime]:
        async with self._lock:
            return dict(self._last_online)

    async def save_order(self, keys: list[str]) -> None:
        async with self._lock:
            self._order = list(keys)

    async def get_order(self) -> list[str]:
        async with self._lock:
            return list(self._order)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._last_online.pop(key, None)
            self._order = [k for k in self._order if k != key]
            self._deleted.add(key)

    async def get_deleted(self) -> set[str]:
        async with self._lock:
            return set(self._deleted)

    async def restore(self, key: str) -> None:
        async with self._lock:
            self._deleted.discard(key)


def create_store(config: StatusboardConfig) -> ServiceStore:
    """SQLite store when a db file is configured, in-memory otherwise.

    SQLite's ":memory:" path also maps to the in-memory store, since each
    SQLite connection would get its own empty database.
    """
    if config.store_db_path in ("", ":memory:"):
        return InMemoryServiceStore()
    from statusboard.dashboard.store_sqlite import SqliteServiceStore

    return SqliteServiceStore(config.store_db_path)
