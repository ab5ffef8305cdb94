"""
Async Redis client facade for the cache layer.
"""

import time
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.config import CacheConfig
from shared.errors import CacheConnectionError, CacheIterationError
from shared.logging import get_logger
from shared.metrics import CacheMetrics
from .models import ScanResult

T = TypeVar("T")

COMPONENT = "RedisCacheService"

STORE_ERRORS = (RedisError, OSError)


def _escape_pattern(prefix: str) -> str:
    """Escape glob metacharacters so a prefix matches literally in SCAN."""
    for char in ("\\", "*", "?", "[", "]"):
        prefix = prefix.replace(char, f"\\{char}")
    return prefix


def _decode(value: Any) -> Any:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class KeyScan:
    """Single-pass async iterator over keys in the store.

    A store error part way through ends the iteration quietly. Afterwards
    ``truncated`` and ``error`` tell whether the scan saw everything.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis],
        prefix: Optional[str] = None,
        *,
        metrics: Optional[CacheMetrics] = None
    ):
        self.prefix = prefix
        self.keys: List[str] = []
        self.truncated = False
        self.error: Optional[CacheIterationError] = None
        self.logger = get_logger("cache.scan")
        self._redis = redis_client
        self._metrics = metrics
        self._iterator = None
        self._exhausted = False

    def __aiter__(self) -> "KeyScan":
        return self

    async def __anext__(self) -> str:
        while not self._exhausted:
            try:
                if self._iterator is None:
                    if self._redis is None:
                        raise CacheConnectionError("Cache client not started")
                    match = f"{_escape_pattern(self.prefix)}*" if self.prefix else None
                    self._iterator = self._redis.scan_iter(match=match).__aiter__()
                key = _decode(await self._iterator.__anext__())
            except StopAsyncIteration:
                self._exhausted = True
                break
            except Exception as e:
                self._fail(e)
                break

            if self.prefix and not key.startswith(self.prefix):
                continue

            self.keys.append(key)
            return key

        raise StopAsyncIteration

    def _fail(self, exc: Exception):
        self._exhausted = True
        self.truncated = True
        self.error = CacheIterationError(
            f"Key scan interrupted: {exc}",
            details={"prefix": self.prefix, "collected": len(self.keys)}
        )
        self.error.__cause__ = exc

        self.logger.warning(
            "Key scan truncated",
            component=COMPONENT,
            prefix=self.prefix,
            collected=len(self.keys),
            error=str(exc)
        )
        if self._metrics:
            self._metrics.record_scan_truncation()

    def result(self) -> ScanResult:
        """Snapshot of what the scan has produced so far."""
        return ScanResult(keys=list(self.keys), truncated=self.truncated, error=self.error)


class CacheClient:
    """Single point of access to the Redis store.

    Injects the configured default TTL on writes. Store failures on the data
    path are logged and raised as ``CacheConnectionError``; nothing is retried
    here.
    """

    def __init__(
        self,
        config: CacheConfig,
        redis_client: Optional[redis.Redis] = None,
        *,
        metrics: Optional[CacheMetrics] = None
    ):
        self.config = config
        self.default_ttl = config.cache_ttl
        self.redis: Optional[redis.Redis] = redis_client
        self.metrics = metrics
        self.logger = get_logger("cache.client")

    async def start(self):
        """Connect to Redis and verify the connection."""
        built = self.redis is None

        try:
            if built:
                self.redis = redis.from_url(
                    self.config.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=self.config.socket_connect_timeout,
                    socket_timeout=self.config.socket_timeout,
                    health_check_interval=30
                )

            await self.redis.ping()

            self.logger.info("Redis cache started", url=self.config.redis_url)

        except STORE_ERRORS as e:
            self.logger.error("Failed to start Redis cache", component=COMPONENT, error=str(e))
            if built:
                await self._discard_client()
            raise CacheConnectionError(
                f"Failed to start Redis cache: {e}",
                code="REDIS_START_FAILED"
            ) from e

    async def stop(self):
        """Close the Redis connection."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def _discard_client(self):
        # Only for a client start() built itself; injected clients belong to the caller
        try:
            await self.redis.aclose()
        except STORE_ERRORS as e:
            self.logger.debug("Failed to close unused Redis client", error=str(e))
        self.redis = None

    async def get(self, key: str) -> Optional[str]:
        """Get a value, or None when the key is missing or expired."""
        value = await self._execute("get", lambda r: r.get(key))

        if self.metrics:
            self.metrics.record_lookup(hit=value is not None)

        return _decode(value)

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> bool:
        """Store a value, overwriting any existing entry and its expiration.

        ``ttl`` is in seconds and falls back to the configured default.
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        # Millisecond precision so sub-second TTLs survive
        ttl_ms = max(1, int(round(ttl * 1000)))

        await self._execute("set", lambda r: r.set(key, value, px=ttl_ms))
        self.logger.debug("Cached value", key=key, ttl=ttl)
        return True

    async def delete(self, key: str) -> int:
        """Delete a key. Deleting a missing key is not an error."""
        return await self._execute("delete", lambda r: r.delete(key))

    async def delete_many(self, keys: Sequence[str]) -> int:
        """Delete a batch of keys in one command."""
        keys = list(keys)
        if not keys:
            return 0

        deleted = await self._execute("delete_many", lambda r: r.delete(*keys))
        self.logger.debug("Deleted keys", requested=len(keys), deleted=deleted)
        return deleted

    def iterate(self, prefix: Optional[str] = None) -> KeyScan:
        """Lazily enumerate keys, optionally only those starting with ``prefix``."""
        return KeyScan(self.redis, prefix, metrics=self.metrics)

    async def scan_keys(self, prefix: Optional[str] = None) -> ScanResult:
        """Drain a key scan and report whether it was complete."""
        scan = self.iterate(prefix)
        async for _ in scan:
            pass
        return scan.result()

    async def get_keys(self, prefix: Optional[str] = None) -> List[str]:
        """List keys, optionally filtered by prefix. Never raises on scan faults."""
        result = await self.scan_keys(prefix)
        return result.keys

    async def clear(self) -> bool:
        """Remove every entry in the current database."""
        await self._execute("clear", lambda r: r.flushdb())
        self.logger.info("Cache cleared")
        return True

    async def _execute(self, operation: str, command: Callable[[redis.Redis], Awaitable[T]]) -> T:
        if self.redis is None:
            raise CacheConnectionError("Cache client not started", details={"operation": operation})

        start_time = time.time()
        try:
            result = await command(self.redis)
        except STORE_ERRORS as e:
            self._record(operation, "error", start_time)
            self.logger.error(
                "Cache store error",
                component=COMPONENT,
                operation=operation,
                error=str(e)
            )
            raise CacheConnectionError(
                f"Cache {operation} failed: {e}",
                details={"operation": operation}
            ) from e

        self._record(operation, "success", start_time)
        return result

    def _record(self, operation: str, status: str, start_time: float):
        if self.metrics:
            self.metrics.record_operation(operation, status, time.time() - start_time)
