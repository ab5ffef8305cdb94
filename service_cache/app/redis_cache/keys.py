"""
Cache key derivation for quotes and portfolio snapshots.

Key formats are shared with data already sitting in Redis and must not change:

    quote-{data_source}:{symbol}
    portfolio-snapshot-{user_id}
    portfolio-snapshot-{user_id}-{sha256 of the filters}

The filter hash is taken over the filters in the order given. Two filter lists
holding the same entries in a different order produce different keys.
"""

import hashlib
import json
from typing import Any, Mapping, Optional, Sequence, Union

from .models import AssetProfileIdentifier, Filter

QUOTE_PREFIX = "quote-"
PORTFOLIO_SNAPSHOT_PREFIX = "portfolio-snapshot-"

FilterLike = Union[Filter, Mapping[str, Any]]


def get_asset_profile_identifier(data_source: str, symbol: str) -> str:
    """Join a data source and symbol into a single identifier."""
    return f"{data_source}:{symbol}"


def get_quote_key(data_source: str, symbol: str) -> str:
    """Generate cache key for a quote."""
    return f"{QUOTE_PREFIX}{get_asset_profile_identifier(data_source, symbol)}"


def get_quote_key_for(identifier: AssetProfileIdentifier) -> str:
    """Generate cache key for a quote from an asset profile identifier."""
    return get_quote_key(identifier.data_source, identifier.symbol)


def _integral_floats_to_int(value: Any) -> Any:
    # JSON.stringify writes 1.0 as 1; keys already in Redis were hashed that way
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, Mapping):
        return {k: _integral_floats_to_int(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_integral_floats_to_int(v) for v in value]
    return value


def serialize_filters(filters: Sequence[FilterLike]) -> str:
    """Serialize filters to compact JSON, preserving list and key order.

    Floats with no fractional part are written as integers, so ``1.0`` and
    ``1`` serialize (and hash) the same.
    """
    payload = [
        _integral_floats_to_int(f.model_dump(mode="json", exclude_none=True) if isinstance(f, Filter) else dict(f))
        for f in filters
    ]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def hash_filters(filters: Sequence[FilterLike]) -> str:
    """Return the lowercase hex SHA-256 digest of the serialized filters."""
    return hashlib.sha256(serialize_filters(filters).encode("utf-8")).hexdigest()


def get_portfolio_snapshot_key(user_id: str, filters: Optional[Sequence[FilterLike]] = None) -> str:
    """Generate cache key for a portfolio snapshot.

    Without filters this is also the prefix shared by every snapshot of the
    user, which is what bulk invalidation scans for.
    """
    key = f"{PORTFOLIO_SNAPSHOT_PREFIX}{user_id}"

    if filters:
        key = f"{key}-{hash_filters(filters)}"

    return key
