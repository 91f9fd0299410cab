"""Redis-backed cache client.

The cache is a derived read accelerator and never an authority: every
operation is bounded by a short timeout, and any Redis error, timeout, or a
missing connection degrades to a miss (reads) or a no-op (writes/deletes).
Callers never see a cache exception.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

_CACHE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


class CacheStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool: ...

    async def delete_by_pattern(self, pattern: str) -> int: ...

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl_seconds: int | None = None,
    ) -> Any: ...


def build_cache_key(prefix: str, params: dict[str, Any] | None = None) -> str:
    """Deterministic key from ``prefix`` and the non-empty ``params``, sorted by name.

    >>> build_cache_key("search:properties", {"guests": 2, "cityId": "c1", "minPrice": None})
    'search:properties:cityId:c1;guests:2'
    """

    def _fmt(value: Any) -> str:
        if isinstance(value, (list, tuple, set, frozenset)):
            return "|".join(sorted(_fmt(v) for v in value))
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    parts = [
        f"{name}:{_fmt(value)}"
        for name, value in sorted((params or {}).items())
        if value is not None and value != "" and value != []
    ]
    return f"{prefix}:{';'.join(parts)}"


class CacheClient:
    """Redis cache with JSON values, TTLs, and pattern invalidation.

    Lifecycle (``connect``/``close``) is owned by the application lifespan.
    If the connection fails the client stays disconnected and every call is
    a miss; a reconnect is attempted at most once per ``reconnect_interval``.
    """

    def __init__(
        self,
        url: str,
        *,
        enabled: bool = True,
        default_ttl: int = 300,
        timeout: float = 0.25,
        invalidation_timeout: float = 2.0,
        scan_count: int = 100,
        delete_batch_size: int = 1000,
        reconnect_interval: float = 5.0,
        client: Redis | None = None,
    ) -> None:
        self.url = url
        self.enabled = enabled
        self.default_ttl = default_ttl
        self.timeout = timeout
        self.invalidation_timeout = invalidation_timeout
        self.scan_count = scan_count
        self.delete_batch_size = delete_batch_size
        self.reconnect_interval = reconnect_interval
        self._redis = client
        self._connected = False
        self._last_attempt: float | None = None
        self._closed = False
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "deletes": 0, "errors": 0}

    @classmethod
    def from_settings(cls, settings) -> "CacheClient":
        return cls(
            settings.redis_url,
            enabled=settings.cache_enabled,
            default_ttl=settings.cache_default_ttl_seconds,
            timeout=settings.cache_operation_timeout_seconds,
            invalidation_timeout=settings.cache_invalidation_timeout_seconds,
            scan_count=settings.cache_scan_count,
            delete_batch_size=settings.cache_delete_batch_size,
            reconnect_interval=settings.cache_reconnect_interval_seconds,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        if not self.enabled or self._connected:
            return
        self._closed = False
        self._last_attempt = time.monotonic()
        if self._redis is None:
            self._redis = Redis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=self.timeout,
                socket_timeout=self.timeout,
            )
        try:
            await asyncio.wait_for(self._redis.ping(), self.timeout)
        except _CACHE_ERRORS as exc:
            self._stats["errors"] += 1
            logger.warning("Redis connect failed; cache unavailable: %r", exc)
            return
        self._connected = True
        logger.info("Redis cache ready")

    async def close(self) -> None:
        self._connected = False
        self._closed = True
        if self._redis is None:
            return
        try:
            await self._redis.aclose()
        except _CACHE_ERRORS as exc:
            logger.warning("Redis close failed: %r", exc)
        self._redis = None
        logger.info("Redis cache closed")

    async def get(self, key: str) -> Any | None:
        if not await self._ensure_connected():
            return None
        try:
            raw = await asyncio.wait_for(self._redis.get(key), self.timeout)
            value = json.loads(raw) if raw is not None else None
        except (*_CACHE_ERRORS, ValueError) as exc:
            self._record_error("get", key, exc)
            return None
        if value is None:
            self._stats["misses"] += 1
        else:
            self._stats["hits"] += 1
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        if not await self._ensure_connected():
            return False
        try:
            payload = json.dumps(value, default=str)
            await asyncio.wait_for(
                self._redis.set(key, payload, ex=int(ttl_seconds or self.default_ttl)),
                self.timeout,
            )
        except (*_CACHE_ERRORS, TypeError) as exc:
            self._record_error("set", key, exc)
            return False
        self._stats["sets"] += 1
        return True

    async def delete_by_pattern(self, pattern: str) -> int:
        """Delete every key matching the glob ``pattern``; returns the number deleted."""
        if not await self._ensure_connected():
            return 0
        try:
            count = await asyncio.wait_for(self._scan_and_delete(pattern), self.invalidation_timeout)
        except _CACHE_ERRORS as exc:
            self._record_error("delete_by_pattern", pattern, exc)
            return 0
        self._stats["deletes"] += count
        logger.info("Cache invalidated by pattern %s: %d keys", pattern, count)
        return count

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl_seconds: int | None = None,
    ) -> Any:
        """Read-through: return the cached value, or compute, store, and return it.

        ``compute`` must return a JSON-serialisable value so hits and misses
        have the same shape.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        result = await compute()
        await self.set(key, result, ttl_seconds)
        return result

    def stats(self) -> dict[str, Any]:
        return {**self._stats, "connected": self._connected, "enabled": self.enabled}

    async def _ensure_connected(self) -> bool:
        """Retry a failed connection at most once per ``reconnect_interval``."""
        if self._connected:
            return True
        if not self.enabled or self._closed:
            return False
        if self._last_attempt is not None and time.monotonic() - self._last_attempt < self.reconnect_interval:
            return False
        await self.connect()
        return self._connected

    async def _scan_and_delete(self, pattern: str) -> int:
        count = 0
        batch: list[str] = []
        async for key in self._redis.scan_iter(match=pattern, count=self.scan_count):
            batch.append(key)
            if len(batch) >= self.delete_batch_size:
                count += await self._redis.delete(*batch)
                batch.clear()
        if batch:
            count += await self._redis.delete(*batch)
        return count

    def _record_error(self, operation: str, key: str, exc: BaseException) -> None:
        self._stats["errors"] += 1
        logger.warning("Redis %s failed for %s: %r", operation, key, exc)
