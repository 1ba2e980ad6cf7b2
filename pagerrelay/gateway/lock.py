"""Cross-instance mutual exclusion for acknowledgement reconciliation."""

from __future__ import annotations

import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger(__name__)


class ReconciliationLock:
    """A named Redis flag set with ``SET NX EX``.

    The TTL only bounds how long a crashed holder can block everyone else;
    a pass that outlives it may overlap with another instance's.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        name: str,
        ttl_secs: int,
        owner: str = "true",
    ) -> None:
        self._redis = redis
        self._name = name
        self._ttl_secs = ttl_secs
        self._owner = owner

    @property
    def name(self) -> str:
        return self._name

    @property
    def ttl_secs(self) -> int:
        return self._ttl_secs

    async def try_acquire(self) -> bool:
        """Take the lock if nobody holds it. Never blocks."""
        acquired = await self._redis.set(
            self._name, self._owner, nx=True, ex=self._ttl_secs,
        )
        return bool(acquired)

    async def release(self) -> None:
        await self._redis.delete(self._name)

    async def clear(self) -> None:
        """Drop the lock regardless of holder (startup only)."""
        holder = await self.held_by()
        await self._redis.delete(self._name)
        if holder is not None:
            logger.warning("reconciliation_lock_cleared", lock=self._name, holder=holder)

    async def held_by(self) -> str | None:
        value = await self._redis.get(self._name)
        return None if value is None else str(value)
