"""
TTL caches for the analytics pipeline.

Entries expire purely by TTL; nothing invalidates them on data writes.
Values must be JSON-compatible so the in-memory and Redis backends are
interchangeable.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cachetools import TLRUCache

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value and how long it stays valid."""
    value: Any
    ttl_seconds: int


def _time_to_use(_key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl_seconds


class TTLCache:
    """Interface shared by the cache backends."""

    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        raise NotImplementedError


class InMemoryTTLCache(TTLCache):
    """
    Process-local cache bounded by maxsize.

    Expired entries are purged on every write; past maxsize the least
    recently used entry goes first. No locking: two concurrent misses on
    the same key both compute and the later write wins.
    """

    def __init__(
        self,
        maxsize: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries = TLRUCache(
            maxsize=maxsize or settings.memory_cache_maxsize,
            ttu=_time_to_use,
            timer=clock,
        )

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = CacheEntry(value=value, ttl_seconds=ttl_seconds)

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)


class RedisTTLCache(TTLCache):
    """Cache shared by all workers through Redis. Failures behave as misses."""

    def __init__(self, prefix: str = "menu-insights"):
        self.prefix = prefix

    async def get(self, key: str) -> Optional[Any]:
        try:
            from app.redis import get_redis

            redis = await get_redis()
            cached = await redis.get(f"{self.prefix}:{key}")
            if cached:
                return json.loads(cached)
        except Exception as e:
            logger.warning(f"Redis cache miss: {e}")
        return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            from app.redis import get_redis

            redis = await get_redis()
            await redis.setex(f"{self.prefix}:{key}", ttl_seconds, json.dumps(value))
        except Exception as e:
            logger.warning(f"Redis cache write failed: {e}")


def create_cache() -> TTLCache:
    """Build the cache backend selected in settings."""
    if settings.cache_backend == "redis":
        return RedisTTLCache()
    return InMemoryTTLCache()
