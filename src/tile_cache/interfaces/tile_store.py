from abc import ABC, abstractmethod
from typing import Callable, Optional

from tile_cache.models.tile import CacheEntry, UpgradeEvent


UpgradeCallback = Callable[[UpgradeEvent], None]


class ITileStore(ABC):
    """Interface for persistent key/value stores holding cache entries"""

    @abstractmethod
    async def open(self, on_upgrade_needed: Optional[UpgradeCallback] = None) -> None:
        """Open the store, creating its schema on first use"""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get an entry by its internal url, None if absent"""
        pass

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Insert or fully replace an entry"""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry"""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored entries"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release held resources"""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass
