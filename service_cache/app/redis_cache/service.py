"""
Redis cache service: the one object request handlers talk to.

Built once at startup and passed to whatever needs the cache; there is no
module-level instance.
"""

from typing import List, Optional, Sequence

import redis.asyncio as redis

from shared.config import CacheConfig, get_config
from shared.metrics import CacheMetrics, get_metrics_collector
from . import keys
from .client import CacheClient
from .health import HealthMonitor
from .invalidation import BulkInvalidator
from .keys import FilterLike
from .models import AssetProfileIdentifier, ScanResult


class RedisCacheService:
    """Facade over the cache client, key derivation, invalidation and health."""

    def __init__(
        self,
        config: CacheConfig,
        redis_client: Optional[redis.Redis] = None,
        *,
        metrics: Optional[CacheMetrics] = None
    ):
        self.config = config
        self.client = CacheClient(config, redis_client, metrics=metrics)
        self.invalidator = BulkInvalidator(self.client)
        self.health_monitor = HealthMonitor(
            self.client,
            key=config.health_check_key,
            timeout=config.health_check_timeout,
            sentinel_ttl=config.health_check_ttl,
            cleanup_timeout=config.health_check_cleanup_timeout,
            metrics=metrics
        )

    @classmethod
    def from_config(cls, config: Optional[CacheConfig] = None) -> "RedisCacheService":
        """Build the service with a Redis connection and the process metrics collector."""
        return cls(config or get_config(), metrics=get_metrics_collector())

    async def start(self):
        await self.client.start()

    async def stop(self):
        await self.client.stop()

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> bool:
        return await self.client.set(key, value, ttl)

    async def remove(self, key: str) -> int:
        return await self.client.delete(key)

    async def get_keys(self, prefix: Optional[str] = None) -> List[str]:
        return await self.client.get_keys(prefix)

    async def scan_keys(self, prefix: Optional[str] = None) -> ScanResult:
        return await self.client.scan_keys(prefix)

    def get_quote_key(self, data_source: str, symbol: str) -> str:
        return keys.get_quote_key(data_source, symbol)

    def get_quote_key_for(self, identifier: AssetProfileIdentifier) -> str:
        return keys.get_quote_key_for(identifier)

    def get_portfolio_snapshot_key(self, user_id: str, filters: Optional[Sequence[FilterLike]] = None) -> str:
        return keys.get_portfolio_snapshot_key(user_id, filters)

    async def is_healthy(self) -> bool:
        return await self.health_monitor.is_healthy()

    async def remove_portfolio_snapshots_by_user_id(self, user_id: str) -> int:
        return await self.invalidator.remove_portfolio_snapshots_by_user_id(user_id)

    async def reset(self) -> bool:
        return await self.invalidator.reset()
