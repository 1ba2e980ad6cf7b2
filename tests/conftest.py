"""Shared fixtures — an in-memory stand-in for the async Redis client."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import pytest
from fakeredis import FakeAsyncRedis

from pagerrelay.core.config import reset_settings


class FakeRedis:
    """Implements the subset of ``redis.asyncio.Redis`` the gateway uses.

    Values are strings (as with ``decode_responses=True``). Expiry is driven
    by a manual clock: call :meth:`advance` to move time forward.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.strings: dict[str, str] = {}
        self.expiry: dict[str, float] = {}
        self.lists: dict[str, list[str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.sets: dict[str, set[str]] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.calls: list[str] = []

    # ── Test helpers ─────────────────────────────────────────────

    def advance(self, secs: float) -> None:
        self.now += secs

    def _expire_stale(self) -> None:
        for key, deadline in list(self.expiry.items()):
            if deadline <= self.now:
                self.strings.pop(key, None)
                del self.expiry[key]

    def _keyspace(self) -> Iterable[dict[str, object]]:
        return (self.strings, self.lists, self.zsets, self.sets, self.hashes)  # type: ignore[return-value]

    # ── Strings ──────────────────────────────────────────────────

    async def set(
        self,
        name: str,
        value: str,
        nx: bool = False,
        ex: int | None = None,
    ) -> bool | None:
        self.calls.append("set")
        self._expire_stale()
        if nx and name in self.strings:
            return None
        self.strings[name] = str(value)
        if ex is not None:
            self.expiry[name] = self.now + ex
        else:
            self.expiry.pop(name, None)
        return True

    async def get(self, name: str) -> str | None:
        self._expire_stale()
        return self.strings.get(name)

    async def delete(self, *names: str) -> int:
        self.calls.append("delete")
        self._expire_stale()
        removed = 0
        for name in names:
            for space in self._keyspace():
                if name in space:
                    del space[name]
                    removed += 1
            self.expiry.pop(name, None)
        return removed

    async def exists(self, *names: str) -> int:
        self._expire_stale()
        return sum(
            1 for name in names if any(name in space for space in self._keyspace())
        )

    # ── Lists ────────────────────────────────────────────────────

    async def rpush(self, name: str, *values: str) -> int:
        self.lists.setdefault(name, []).extend(str(v) for v in values)
        return len(self.lists[name])

    async def lpush(self, name: str, *values: str) -> int:
        items = self.lists.setdefault(name, [])
        for value in values:
            items.insert(0, str(value))
        return len(items)

    async def blpop(
        self, keys: list[str], timeout: float = 0
    ) -> tuple[str, str] | None:
        """Pop from the first non-empty list; ``timeout=0`` waits forever."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout else None
        while True:
            for key in keys:
                items = self.lists.get(key)
                if items:
                    return key, items.pop(0)
            if deadline is not None and loop.time() >= deadline:
                return None
            await asyncio.sleep(0.001)

    async def lrange(self, name: str, start: int, end: int) -> list[str]:
        items = self.lists.get(name, [])
        return items[start:] if end == -1 else items[start:end + 1]

    # ── Sorted sets / sets / hashes ──────────────────────────────

    async def zadd(self, name: str, mapping: dict[str, float]) -> int:
        self.zsets.setdefault(name, {}).update(mapping)
        return len(mapping)

    async def zrange(self, name: str, start: int, end: int) -> list[str]:
        members = sorted(self.zsets.get(name, {}).items(), key=lambda kv: (kv[1], kv[0]))
        names = [m for m, _ in members]
        return names[start:] if end == -1 else names[start:end + 1]

    async def sadd(self, name: str, *values: str) -> int:
        self.sets.setdefault(name, set()).update(values)
        return len(values)

    async def sunion(self, keys: list[str]) -> set[str]:
        result: set[str] = set()
        for key in keys:
            result |= self.sets.get(key, set())
        return result

    async def hset(self, name: str, mapping: dict[str, str]) -> int:
        self.hashes.setdefault(name, {}).update(mapping)
        return len(mapping)

    async def hgetall(self, name: str) -> dict[str, str]:
        return dict(self.hashes.get(name, {}))

    async def aclose(self) -> None:
        pass


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def server_redis():
    """A fakeredis client that speaks the real command semantics (TTLs, NX)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()
