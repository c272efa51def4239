"""Persistent store — async key/value access to the kv_store table.

Every entity lives in one logical table per user, stored as a single JSON
value under `tracker:{user_key}:{table}`. Writes replace the whole value, so
repositories hold the user's `UserStore.lock` across each read-modify-write.
The locks are per process; run a single worker.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


class KeyValueStore(Protocol):
    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store for tests and scratch use."""

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (data or {}).items():
            self._data[key] = json.dumps(value)

    async def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SqlStore:
    """Store backed by the kv_store table through an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str, default: Any = None) -> Any:
        result = await self._session.execute(
            text("SELECT value FROM kv_store WHERE key = :key"),
            {"key": key},
        )
        raw = result.scalar_one_or_none()
        if raw is None:
            return default
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        await self._session.execute(
            text(
                "INSERT INTO kv_store (key, value) VALUES (:key, :value) "
                "ON CONFLICT (key) DO UPDATE SET value = excluded.value"
            ),
            {"key": key, "value": json.dumps(value)},
        )
        await self._session.commit()
        logger.debug(f"Stored {key}")

    async def delete(self, key: str) -> None:
        await self._session.execute(text("DELETE FROM kv_store WHERE key = :key"), {"key": key})
        await self._session.commit()


class UserLocks:
    """One asyncio.Lock per user key, shared by every request for that user."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def for_user(self, user_key: str) -> asyncio.Lock:
        lock = self._locks.get(user_key)
        if lock is None:
            lock = self._locks[user_key] = asyncio.Lock()
        return lock


class UserStore:
    """A store view whose keys are namespaced by one user key."""

    def __init__(self, backend: KeyValueStore, user_key: str, lock: asyncio.Lock | None = None):
        self.backend = backend
        self.user_key = user_key
        self.lock = lock if lock is not None else asyncio.Lock()

    def key_for(self, table: str) -> str:
        return f"tracker:{self.user_key}:{table}"

    async def get(self, table: str, default: Any = None) -> Any:
        return await self.backend.get(self.key_for(table), default)

    async def set(self, table: str, value: Any) -> None:
        await self.backend.set(self.key_for(table), value)

    async def delete(self, table: str) -> None:
        await self.backend.delete(self.key_for(table))
