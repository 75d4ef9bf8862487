"""Cache backends for per-user session views (no-op, in-memory and Redis)."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any, Protocol

from app.core.config import Settings, get_settings
from app.core.enums import CacheBackendEnum


class CacheBackend(Protocol):
    """Protocol for cache providers (Redis, memory, etc.)."""

    async def get(self, key: str) -> str | None:
        """Get cached value by key."""

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Set cached value with optional TTL."""

    async def delete(self, key: str) -> None:
        """Delete cached value by key."""


class NoopCacheBackend:
    """Default cache backend: every read misses."""

    async def get(self, key: str) -> str | None:
        return None

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None


class InMemoryCacheBackend:
    """Process-local cache with per-key expiry."""

    def __init__(self, now_provider: Callable[[], float] | None = None) -> None:
        self._entries: dict[str, tuple[str, float | None]] = {}
        self._lock = asyncio.Lock()
        self._now = now_provider or time.monotonic

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= self._now():
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = self._now() + ttl_seconds if ttl_seconds else None
        async with self._lock:
            self._entries[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)


class RedisCacheBackend:
    """Redis-backed cache shared across application instances."""

    def __init__(self, redis_url: str, namespace: str) -> None:
        self._redis_url = redis_url
        self._namespace = namespace
        self._client: Any | None = None
        self._init_lock = asyncio.Lock()

    def _build_storage_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def _ensure_initialized(self) -> None:
        if self._client is not None:
            return

        async with self._init_lock:
            if self._client is None:
                from redis.asyncio import from_url

                self._client = from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )

    async def get(self, key: str) -> str | None:
        await self._ensure_initialized()
        return await self._client.get(self._build_storage_key(key))

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        await self._ensure_initialized()
        await self._client.set(self._build_storage_key(key), value, ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._ensure_initialized()
        await self._client.delete(self._build_storage_key(key))


_cache_backend: CacheBackend | None = None
_cache_backend_signature: tuple[str, str | None, str] | None = None


def _build_cache_backend(settings: Settings) -> CacheBackend:
    if settings.session_cache_backend == CacheBackendEnum.REDIS:
        return RedisCacheBackend(
            redis_url=settings.redis_url or "",
            namespace=settings.session_cache_redis_namespace,
        )
    if settings.session_cache_backend == CacheBackendEnum.MEMORY:
        return InMemoryCacheBackend()
    return NoopCacheBackend()


def get_cache_backend() -> CacheBackend:
    """Return shared cache instance for configured backend."""
    global _cache_backend, _cache_backend_signature
    settings = get_settings()
    signature = (
        str(settings.session_cache_backend),
        settings.redis_url,
        settings.session_cache_redis_namespace,
    )
    if _cache_backend is None or _cache_backend_signature != signature:
        _cache_backend = _build_cache_backend(settings)
        _cache_backend_signature = signature
    return _cache_backend
