"""Per-participant session persistence with expiry.

Two interchangeable backends share the ``get``/``set``/``close`` contract:

* ``RedisSessionStore`` keeps JSON snapshots in Redis and relies on the
  server-side ``EX`` expiry.
* ``MemorySessionStore`` keeps snapshots in a process-local dict together with
  their expiry time. It is not durable and is not shared between processes;
  use it for a single bot instance or for tests.

Both return a freshly decoded ``Session`` on every read, so callers may mutate
what they load without touching the stored copy.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from redis.asyncio import Redis

from .config import Settings
from .types import Session

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 3600


class SessionStore(Protocol):
    async def get(self, key: str) -> Session | None: ...

    async def set(self, key: str, session: Session, ttl_s: int = DEFAULT_TTL_S) -> None: ...

    async def close(self) -> None: ...


def _decode(key: str, payload: str | bytes | None) -> Session | None:
    if payload is None:
        return None
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    try:
        return Session.from_json(payload)
    except (ValueError, KeyError, TypeError):
        logger.warning("session_decode_failed key=%s", key, exc_info=True)
        return None


class RedisSessionStore:
    def __init__(self, redis: Redis, *, prefix: str = "session") -> None:
        self._redis = redis
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "session") -> "RedisSessionStore":
        return cls(Redis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Session | None:
        return _decode(key, await self._redis.get(self._key(key)))

    async def set(self, key: str, session: Session, ttl_s: int = DEFAULT_TTL_S) -> None:
        await self._redis.set(self._key(key), session.to_json(), ex=ttl_s)

    async def close(self) -> None:
        await self._redis.aclose()


class MemorySessionStore:
    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> Session | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return _decode(key, payload)

    async def set(self, key: str, session: Session, ttl_s: int = DEFAULT_TTL_S) -> None:
        self._entries[key] = (self._clock() + ttl_s, session.to_json())

    async def close(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def make_session_store(settings: Settings) -> SessionStore:
    if settings.session_store == "redis":
        logger.info("session_store: backend=redis")
        return RedisSessionStore.from_url(settings.redis_url)
    logger.info("session_store: backend=memory (single process, not durable)")
    return MemorySessionStore()
