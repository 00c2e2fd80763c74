"""Secondary cache backends: in-process TTL dict and Redis."""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import redis
from pydantic import ValidationError

from ..config import Settings
from ..exceptions import CacheError
from ..models import CacheEntry
from ..redaction import sanitize_text
from .base import SecondaryCache

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InMemoryTTLCache(SecondaryCache):
    """Thread-safe in-process cache with per-key expiry."""

    def __init__(self, *, clock: Clock = _utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[CacheEntry, datetime]] = {}

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            entry, expires_at = item
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, entry: CacheEntry, ttl: timedelta) -> None:
        with self._lock:
            self._entries[key] = (entry, self._clock() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache(SecondaryCache):
    """Redis-backed cache; entries are stored as JSON with SETEX."""

    def __init__(self, client: redis.Redis, logger: logging.Logger) -> None:
        self._redis = client
        self.logger = logger

    @classmethod
    def from_url(cls, url: str, logger: logging.Logger) -> RedisCache:
        return cls(redis.Redis.from_url(url), logger)

    def get(self, key: str) -> CacheEntry | None:
        try:
            raw = self._redis.get(key)
        except redis.RedisError as exc:
            raise CacheError(f"Redis GET failed for {key}: {sanitize_text(str(exc))}") from exc
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError as exc:
            # A corrupt entry is a miss; the next successful fetch overwrites it.
            self.logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

    def set(self, key: str, entry: CacheEntry, ttl: timedelta) -> None:
        ttl_seconds = max(1, math.ceil(ttl.total_seconds()))
        try:
            self._redis.setex(key, ttl_seconds, entry.model_dump_json())
        except redis.RedisError as exc:
            raise CacheError(f"Redis SETEX failed for {key}: {sanitize_text(str(exc))}") from exc


def build_cache(settings: Settings, logger: logging.Logger) -> SecondaryCache:
    """Build the cache backend selected by CACHE_BACKEND."""
    if settings.cache_backend == "redis":
        if not settings.redis_url:
            raise CacheError("REDIS_URL is required for the redis cache backend.")
        return RedisCache.from_url(settings.redis_url, logger)
    return InMemoryTTLCache()
