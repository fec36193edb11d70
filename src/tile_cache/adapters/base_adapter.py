from abc import ABC
from typing import Optional

from tile_cache.interfaces.tile_store import ITileStore, UpgradeCallback
from tile_cache.models.tile import UpgradeEvent
from tile_cache.exceptions.tile_cache_exceptions import StoreInitError


class BaseStoreAdapter(ITileStore, ABC):
    """Base adapter class for all tile stores"""

    def __init__(self, database_name: str, database_version: int, store_name: str):
        self.database_name = database_name
        self.database_version = database_version
        self.store_name = store_name
        self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    def _check_version(self, stored_version: int) -> bool:
        """Return True when the schema needs an upgrade, raise on downgrade"""
        if stored_version > self.database_version:
            raise StoreInitError(
                f"VersionError: database {self.database_name!r} has version {stored_version}, "
                f"requested {self.database_version}"
            )
        return stored_version < self.database_version

    def _notify_upgrade(self, on_upgrade_needed: Optional[UpgradeCallback], stored_version: int) -> None:
        if on_upgrade_needed is None:
            return
        on_upgrade_needed(UpgradeEvent(
            database_name=self.database_name,
            store_name=self.store_name,
            old_version=stored_version,
            new_version=self.database_version,
        ))
