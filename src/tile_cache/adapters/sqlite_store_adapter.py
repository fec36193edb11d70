import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional, Union

from tile_cache.adapters.base_adapter import BaseStoreAdapter
from tile_cache.interfaces.tile_store import UpgradeCallback
from tile_cache.models.tile import CacheEntry
from tile_cache.exceptions.tile_cache_exceptions import (
    StoreInitError,
    StoreReadError,
    StoreWriteError,
)

logger = logging.getLogger(__name__)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteTileStore(BaseStoreAdapter):
    """Tile store backed by a SQLite database file.

    Every store name is a table keyed by the internal tile url. The schema
    version is kept in ``PRAGMA user_version``; opening with a newer version
    triggers the upgrade callback and creates the table, opening with an
    older one fails.

    All blocking sqlite calls run in a worker thread.
    """

    def __init__(self, cache_dir: Union[str, Path], database_name: str,
                 database_version: int, store_name: str):
        super().__init__(database_name, database_version, store_name)
        self.cache_dir = Path(cache_dir)
        self.file_path = self.cache_dir / f"{database_name}.sqlite"
        self._table = _quote_identifier(store_name)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.file_path))

    async def open(self, on_upgrade_needed: Optional[UpgradeCallback] = None) -> None:
        try:
            stored_version = await asyncio.to_thread(self._read_version)
        except (sqlite3.Error, OSError) as e:
            raise StoreInitError(f"Failed to open {self.file_path}: {e}") from e

        if self._check_version(stored_version):
            logger.info("Upgrading %s from version %d to %d", self.file_path, stored_version,
                        self.database_version)
            self._notify_upgrade(on_upgrade_needed, stored_version)
            try:
                await asyncio.to_thread(self._upgrade)
            except sqlite3.Error as e:
                raise StoreInitError(f"Failed to upgrade {self.file_path}: {e}") from e

        try:
            has_table = await asyncio.to_thread(self._has_table)
        except sqlite3.Error as e:
            raise StoreInitError(f"Failed to open {self.file_path}: {e}") from e
        if not has_table:
            raise StoreInitError(
                f"Store {self.store_name!r} does not exist in database {self.database_name!r} "
                f"version {self.database_version}"
            )
        self._opened = True

    def _read_version(self) -> int:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn:
            return conn.execute("PRAGMA user_version").fetchone()[0]

    def _upgrade(self) -> None:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {self._table} ("
                    "url TEXT PRIMARY KEY, "
                    "timestamp INTEGER NOT NULL, "
                    "data BLOB NOT NULL, "
                    "content_type TEXT NOT NULL)"
                )
                conn.execute(f"PRAGMA user_version = {int(self.database_version)}")

    def _has_table(self) -> bool:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
                (self.store_name,)
            ).fetchone()
            return row is not None

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            return await asyncio.to_thread(self._get, key)
        except sqlite3.Error as e:
            raise StoreReadError(f"Failed to read {key}: {e}") from e

    def _get(self, key: str) -> Optional[CacheEntry]:
        with closing(self._connect()) as conn:
            row = conn.execute(
                f"SELECT url, timestamp, data, content_type FROM {self._table} WHERE url = ?",
                (key,)
            ).fetchone()
        if row is None:
            return None
        url, timestamp, data, content_type = row
        return CacheEntry(url=url, timestamp=int(timestamp), data=bytes(data),
                          content_type=content_type or "")

    async def put(self, entry: CacheEntry) -> None:
        try:
            await asyncio.to_thread(self._put, entry)
        except sqlite3.Error as e:
            raise StoreWriteError(f"Failed to store {entry.url}: {e}") from e

    def _put(self, entry: CacheEntry) -> None:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute(
                    f"INSERT OR REPLACE INTO {self._table} (url, timestamp, data, content_type) "
                    "VALUES (?, ?, ?, ?)",
                    (entry.url, int(entry.timestamp), sqlite3.Binary(entry.data), entry.content_type)
                )

    async def clear(self) -> None:
        try:
            await asyncio.to_thread(self._clear)
        except sqlite3.Error as e:
            raise StoreWriteError(f"Failed to clear store {self.store_name}: {e}") from e

    def _clear(self) -> None:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute(f"DELETE FROM {self._table}")

    async def count(self) -> int:
        try:
            return await asyncio.to_thread(self._count)
        except sqlite3.Error as e:
            raise StoreReadError(f"Failed to count store {self.store_name}: {e}") from e

    def _count(self) -> int:
        with closing(self._connect()) as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()[0]

    async def close(self) -> None:
        self._opened = False
