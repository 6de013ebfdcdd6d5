from __future__ import annotations
import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol
from redis.asyncio import Redis
from ecolearn.config import settings


class KeyValueStore(Protocol):
    """String key-value store used for chat sessions and rate-limit counters."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None: ...

    async def delete(self, key: str) -> bool: ...

    def lock(self, key: str):
        """Async context manager serialising read-modify-write on `key`."""
        ...


class MemoryStore:
    """Process-local store. State is lost on restart and not shared between workers."""

    SWEEP_INTERVAL = 60.0

    def __init__(self, clock=time.monotonic):
        self._data: dict[str, tuple[str, float | None]] = {}
        # a key's lock lives only while someone holds or waits on it
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_refs: dict[str, int] = {}
        self._clock = clock
        self._next_sweep = clock() + self.SWEEP_INTERVAL

    def _sweep(self, now: float) -> None:
        expired = [k for k, (_, exp) in self._data.items() if exp is not None and now >= exp]
        for k in expired:
            del self._data[k]
        self._next_sweep = now + self.SWEEP_INTERVAL

    async def get(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires = item
        if expires is not None and self._clock() >= expires:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        expires = now + ttl_seconds if ttl_seconds else None
        self._data[key] = (value, expires)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        lk = self._locks.setdefault(key, asyncio.Lock())
        self._lock_refs[key] = self._lock_refs.get(key, 0) + 1
        try:
            async with lk:
                yield
        finally:
            self._lock_refs[key] -= 1
            if not self._lock_refs[key]:
                del self._lock_refs[key]
                del self._locks[key]


class RedisStore:
    def __init__(self, redis: Redis, lock_timeout: float = 5.0):
        self._redis = redis
        self._lock_timeout = lock_timeout

    @classmethod
    def from_url(cls, url: str) -> "RedisStore":
        return cls(Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        await self._redis.set(key, value, ex=ttl_seconds)

    async def delete(self, key: str) -> bool:
        return bool(await self._redis.delete(key))

    def lock(self, key: str):
        return self._redis.lock(f"lock:{key}", timeout=self._lock_timeout, blocking_timeout=self._lock_timeout)


_store: KeyValueStore | None = None

def get_kv_store() -> KeyValueStore:
    global _store
    if _store is None:
        if settings.kv_backend == "redis":
            _store = RedisStore.from_url(settings.redis_url)
        else:
            _store = MemoryStore()
    return _store
