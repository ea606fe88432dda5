"""
Key/value storage for computed analysis results.

Backends:
  - Redis (when ``REDIS_URL`` is set, reachable, and ``DISABLE_REDIS`` is off)
  - In-process dict otherwise, so the service still works without Redis

Stores are plain objects handed to their users (see
``fund_lib.services.analysis_cache``); there is no module-level singleton.
Entries are written without expiry.  Per-day analysis keys embed the
calendar date, so yesterday's entries are simply never read again.
"""

import json
import logging
from typing import Any, Protocol

import redis

from fund_lib.core.config import Settings

logger = logging.getLogger("cache")

KEY_PREFIX = "fund"


def cache_key(*parts: Any) -> str:
    """Build a namespaced key, e.g. ``fund:analysis:161725:2025-06-03``."""
    return ":".join([KEY_PREFIX, *(str(p) for p in parts)])


def dumps(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode()


def loads(raw: bytes) -> Any:
    return json.loads(raw.decode())


class CacheStore(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes) -> None: ...


class MemoryStore:
    """Process-local store.  Nothing is shared across processes."""

    name = "memory"

    def __init__(self):
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        self._data[key] = data

    def __len__(self) -> int:
        return len(self._data)

    def keys(self) -> list[str]:
        return list(self._data)


class RedisStore:
    """Redis-backed store; keys are shared by every process on the same DB."""

    name = "redis"

    def __init__(self, client: "redis.Redis"):
        self._r = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStore":
        return cls(redis.from_url(url, decode_responses=False))

    def ping(self) -> bool:
        return bool(self._r.ping())

    def get(self, key: str) -> bytes | None:
        result = self._r.get(key)
        if isinstance(result, bytes):
            return result
        return None

    def set(self, key: str, data: bytes) -> None:
        self._r.set(key, data)


def make_store(settings: Settings) -> CacheStore:
    """Pick the best available backend for *settings*.

    Falls back to ``MemoryStore`` when Redis is disabled, unconfigured or
    unreachable.
    """
    if settings.disable_redis or not settings.redis_url:
        return MemoryStore()

    try:
        store = RedisStore.from_url(settings.redis_url)
        store.ping()
    except redis.RedisError as exc:
        logger.warning("Redis unavailable at %s (%s), using in-memory cache", settings.redis_url, exc)
        return MemoryStore()

    logger.info("Analysis cache backed by Redis at %s", settings.redis_url)
    return store
