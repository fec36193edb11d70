from enum import Enum
from typing import Optional

from tile_cache.models.tile import CacheEntry


class Freshness(Enum):
    FRESH = "fresh"
    STALE = "stale"
    MISSING = "missing"


class FreshnessPolicy:
    """Classifies a stored entry by its age.

    Stale entries are never discarded; the cache tries to refresh them and
    keeps serving the old data if the refresh fails.
    """

    def __init__(self, max_age_ms: int):
        self.max_age_ms = max_age_ms

    def classify(self, entry: Optional[CacheEntry], now_ms: int) -> Freshness:
        if entry is None:
            return Freshness.MISSING
        if now_ms - entry.timestamp < self.max_age_ms:
            return Freshness.FRESH
        return Freshness.STALE

    def is_fresh(self, entry: CacheEntry, now_ms: int) -> bool:
        return self.classify(entry, now_ms) is Freshness.FRESH
