"""
Tile Cache - spatial tile cache with freshness policy and paced seeding
"""

from tile_cache.core.tile_cache import TileCache
from tile_cache.models.cache_options import CacheOptions
from tile_cache.models.tile import CacheEntry, SeedProgress, TileCoordinate
from tile_cache.exceptions.tile_cache_exceptions import (
    TileCacheException,
    NotFoundError,
    FetchError,
    StoreError,
)

__version__ = "0.3.0"

__all__ = [
    "TileCache",
    "CacheOptions",
    "CacheEntry",
    "SeedProgress",
    "TileCoordinate",
    "TileCacheException",
    "NotFoundError",
    "FetchError",
    "StoreError",
]
