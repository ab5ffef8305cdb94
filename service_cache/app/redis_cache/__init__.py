"""
Redis cache layer.

Derives cache keys for quotes and portfolio snapshots, reads and writes
TTL-governed string values, invalidates snapshots by user namespace, and
checks store liveness within a bounded time.
"""

from .client import CacheClient, KeyScan
from .health import HealthMonitor
from .invalidation import BulkInvalidator
from .keys import (
    get_asset_profile_identifier,
    get_portfolio_snapshot_key,
    get_quote_key,
    get_quote_key_for,
    hash_filters,
)
from .models import AssetProfileIdentifier, Filter, FilterType, ScanResult
from .service import RedisCacheService

__all__ = [
    "AssetProfileIdentifier",
    "BulkInvalidator",
    "CacheClient",
    "Filter",
    "FilterType",
    "HealthMonitor",
    "KeyScan",
    "RedisCacheService",
    "ScanResult",
    "get_asset_profile_identifier",
    "get_portfolio_snapshot_key",
    "get_quote_key",
    "get_quote_key_for",
    "hash_filters",
]
