#!/usr/bin/env python3
"""
Tests for the freshness policy
"""

from tile_cache.models.tile import CacheEntry
from tile_cache.services.freshness_policy import Freshness, FreshnessPolicy


def entry_at(timestamp: int) -> CacheEntry:
    return CacheEntry(url="http://{s}.example.com/0/0/0.png", timestamp=timestamp, data=b"x")


class TestFreshnessPolicy:

    def test_missing_entry(self):
        assert FreshnessPolicy(1000).classify(None, 5000) is Freshness.MISSING

    def test_younger_than_max_age_is_fresh(self):
        policy = FreshnessPolicy(1000)
        assert policy.classify(entry_at(4001), 5000) is Freshness.FRESH
        assert policy.is_fresh(entry_at(4001), 5000)

    def test_exactly_max_age_is_stale(self):
        assert FreshnessPolicy(1000).classify(entry_at(4000), 5000) is Freshness.STALE

    def test_zero_max_age_is_always_stale(self):
        assert FreshnessPolicy(0).classify(entry_at(5000), 5000) is Freshness.STALE
