from dataclasses import replace
from typing import Dict, Optional

from tile_cache.adapters.base_adapter import BaseStoreAdapter
from tile_cache.interfaces.tile_store import UpgradeCallback
from tile_cache.models.tile import CacheEntry


class MemoryTileStore(BaseStoreAdapter):
    """Dict backed tile store for ephemeral caches and tests.

    The instance itself plays the role of the database: its version starts
    at 0, so the first open always reports an upgrade.
    """

    def __init__(self, database_name: str = "memory", database_version: int = 1,
                 store_name: str = "tiles"):
        super().__init__(database_name, database_version, store_name)
        self.stored_version = 0
        self.entries: Dict[str, CacheEntry] = {}

    async def open(self, on_upgrade_needed: Optional[UpgradeCallback] = None) -> None:
        if self._check_version(self.stored_version):
            self._notify_upgrade(on_upgrade_needed, self.stored_version)
            self.stored_version = self.database_version
        self._opened = True

    async def get(self, key: str) -> Optional[CacheEntry]:
        entry = self.entries.get(key)
        return replace(entry) if entry is not None else None

    async def put(self, entry: CacheEntry) -> None:
        self.entries[entry.url] = replace(entry)

    async def clear(self) -> None:
        self.entries.clear()

    async def count(self) -> int:
        return len(self.entries)

    async def close(self) -> None:
        self._opened = False
