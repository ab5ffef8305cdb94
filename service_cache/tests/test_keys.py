"""
Unit tests for cache key derivation.
"""

import hashlib
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_cache.app.redis_cache.keys import (
    get_asset_profile_identifier,
    get_portfolio_snapshot_key,
    get_quote_key,
    get_quote_key_for,
    hash_filters,
    serialize_filters,
)
from service_cache.app.redis_cache.models import AssetProfileIdentifier, Filter, FilterType
from shared.test_helpers import TestDataFactory


class TestQuoteKey:
    """Test cases for quote keys."""

    def test_quote_key_format(self):
        """Quote key joins data source and symbol."""
        assert get_quote_key("YAHOO", "AAPL") == "quote-YAHOO:AAPL"

    def test_quote_key_is_deterministic(self):
        """Identical inputs yield identical keys."""
        assert get_quote_key("YAHOO", "AAPL") == get_quote_key("YAHOO", "AAPL")

    def test_quote_key_from_identifier(self):
        """Identifier model produces the same key as the plain fields."""
        identifier = AssetProfileIdentifier(data_source="COINGECKO", symbol="bitcoin")
        assert get_quote_key_for(identifier) == "quote-COINGECKO:bitcoin"

    def test_asset_profile_identifier(self):
        """Asset profile identifier uses a colon separator."""
        assert get_asset_profile_identifier("MANUAL", "HOUSE-1") == "MANUAL:HOUSE-1"

    def test_distinct_quotes_have_distinct_keys(self):
        """Every test quote maps to its own key."""
        quotes = TestDataFactory.create_test_quotes()
        keys = {get_quote_key(q["data_source"], q["symbol"]) for q in quotes}
        assert len(keys) == len(quotes)


class TestPortfolioSnapshotKey:
    """Test cases for portfolio snapshot keys."""

    def test_key_without_filters(self):
        """No filters gives the bare user key."""
        assert get_portfolio_snapshot_key("u1") == "portfolio-snapshot-u1"

    def test_empty_filters_treated_as_none(self):
        """An empty filter list does not add a hash suffix."""
        assert get_portfolio_snapshot_key("u1", []) == "portfolio-snapshot-u1"

    def test_key_with_filters_has_sha256_suffix(self):
        """Filters append a 64-character lowercase hex digest."""
        key = get_portfolio_snapshot_key("u1", [{"a": 1}])

        prefix, _, digest = key.rpartition("-")
        assert prefix == "portfolio-snapshot-u1"
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_filter_digest_matches_compact_json(self):
        """Digest is SHA-256 over compact JSON of the filters."""
        expected = hashlib.sha256(b'[{"a":1}]').hexdigest()
        assert get_portfolio_snapshot_key("u1", [{"a": 1}]) == f"portfolio-snapshot-u1-{expected}"

    def test_key_is_stable_across_calls(self):
        """Same filters in the same order give the same key."""
        filters = TestDataFactory.create_test_filters()
        assert get_portfolio_snapshot_key("u1", filters) == get_portfolio_snapshot_key("u1", list(filters))

    def test_different_filters_give_different_keys(self):
        """Adding a filter changes the key."""
        one = get_portfolio_snapshot_key("u1", [{"a": 1}])
        two = get_portfolio_snapshot_key("u1", [{"a": 1}, {"b": 2}])
        assert one != two

    def test_filter_order_matters(self):
        """Reordered filters hash differently."""
        forward = get_portfolio_snapshot_key("u1", [{"a": 1}, {"b": 2}])
        reversed_ = get_portfolio_snapshot_key("u1", [{"b": 2}, {"a": 1}])
        assert forward != reversed_

    def test_filter_key_order_matters(self):
        """Object key order inside a filter is kept, not sorted."""
        assert hash_filters([{"id": "x", "type": "TAG"}]) != hash_filters([{"type": "TAG", "id": "x"}])

    def test_filter_models_serialize_like_mappings(self):
        """A Filter model hashes the same as the equivalent mapping."""
        model = Filter(id="tech", type=FilterType.TAG)
        assert hash_filters([model]) == hash_filters([{"id": "tech", "type": "TAG"}])

    def test_non_ascii_kept_verbatim(self):
        """Non-ASCII characters are serialized as-is."""
        assert serialize_filters([{"id": "café", "type": "TAG"}]) == '[{"id":"café","type":"TAG"}]'

    def test_integral_floats_written_as_integers(self):
        """1.0 serializes as 1, at any depth, so it hashes like the integer."""
        assert serialize_filters([{"a": 1.0, "b": [2.0, {"c": -3.0}]}]) == '[{"a":1,"b":[2,{"c":-3}]}]'
        assert hash_filters([{"a": 1.0}]) == hash_filters([{"a": 1}])
        assert hash_filters([{"a": 1.0}]) == hashlib.sha256(b'[{"a":1}]').hexdigest()

    def test_fractional_floats_and_booleans_untouched(self):
        """Only integral floats are rewritten."""
        assert serialize_filters([{"a": 1.5, "b": True, "c": 0}]) == '[{"a":1.5,"b":true,"c":0}]'

    def test_filtered_key_shares_unfiltered_prefix(self):
        """Filtered keys start with the bare user key."""
        base = get_portfolio_snapshot_key("u1")
        filtered = get_portfolio_snapshot_key("u1", TestDataFactory.create_test_filters())
        assert filtered.startswith(base + "-")

    @pytest.mark.parametrize("user_id", ["u1", "8d1a6c2e-7f0b-4d5e-9a3c-1b2c3d4e5f60"])
    def test_user_id_is_embedded(self, user_id):
        """User id appears verbatim after the prefix."""
        assert get_portfolio_snapshot_key(user_id) == f"portfolio-snapshot-{user_id}"
