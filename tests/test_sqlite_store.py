#!/usr/bin/env python3
"""
Tests for the SQLite tile store
"""

import sqlite3
from pathlib import Path

import pytest

from conftest import FakeFetcher
from tile_cache.adapters.sqlite_store_adapter import SQLiteTileStore
from tile_cache.constants import EVENT_ERROR, EVENT_UPGRADE_NEEDED
from tile_cache.core.tile_cache import TileCache
from tile_cache.exceptions.tile_cache_exceptions import NotFoundError, StoreInitError
from tile_cache.models.cache_options import CacheOptions
from tile_cache.models.tile import CacheEntry, TileCoordinate


def make_store(tmp_path: Path, version: int = 1, store_name: str = "OSM") -> SQLiteTileStore:
    return SQLiteTileStore(tmp_path, "tile-cache-data", version, store_name)


def make_entry(url: str = "http://{s}.example.com/0/0/0.png", timestamp: int = 1,
               data: bytes = b"\x00\x01png") -> CacheEntry:
    return CacheEntry(url=url, timestamp=timestamp, data=data, content_type="image/png")


class TestSQLiteTileStore:

    @pytest.mark.asyncio
    async def test_first_open_requests_upgrade(self, tmp_path):
        upgrades = []
        store = make_store(tmp_path)
        await store.open(upgrades.append)

        assert store.is_open
        assert store.file_path == tmp_path / "tile-cache-data.sqlite"
        assert len(upgrades) == 1
        assert upgrades[0].old_version == 0
        assert upgrades[0].new_version == 1

        upgrades.clear()
        await make_store(tmp_path).open(upgrades.append)
        assert upgrades == []

    @pytest.mark.asyncio
    async def test_put_get_and_replace(self, tmp_path):
        store = make_store(tmp_path)
        await store.open()

        assert await store.get("missing") is None

        await store.put(make_entry(timestamp=1, data=b"first"))
        await store.put(make_entry(timestamp=2, data=b"second"))

        entry = await store.get("http://{s}.example.com/0/0/0.png")
        assert entry == make_entry(timestamp=2, data=b"second")
        assert isinstance(entry.data, bytes)
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_entries_persist_across_instances(self, tmp_path):
        first = make_store(tmp_path)
        await first.open()
        await first.put(make_entry())

        second = make_store(tmp_path)
        await second.open()
        assert await second.get(make_entry().url) == make_entry()

    @pytest.mark.asyncio
    async def test_clear(self, tmp_path):
        store = make_store(tmp_path)
        await store.open()
        await store.put(make_entry(url="a"))
        await store.put(make_entry(url="b"))

        await store.clear()

        assert await store.count() == 0
        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_older_version_fails(self, tmp_path):
        await make_store(tmp_path, version=2).open()

        with pytest.raises(StoreInitError, match="VersionError"):
            await make_store(tmp_path, version=1).open()

    @pytest.mark.asyncio
    async def test_unknown_store_name_fails(self, tmp_path):
        await make_store(tmp_path, store_name="OSM").open()

        with pytest.raises(StoreInitError):
            await make_store(tmp_path, store_name="Satellite").open()

    @pytest.mark.asyncio
    async def test_unreadable_file_fails(self, tmp_path):
        (tmp_path / "tile-cache-data.sqlite").write_bytes(b"this is not a database" * 10)

        with pytest.raises(StoreInitError):
            await make_store(tmp_path).open()

    @pytest.mark.asyncio
    async def test_schema(self, tmp_path):
        store = make_store(tmp_path)
        await store.open()

        conn = sqlite3.connect(str(store.file_path))
        try:
            columns = [row[1] for row in conn.execute('PRAGMA table_info("OSM")')]
            version = conn.execute("PRAGMA user_version").fetchone()[0]
        finally:
            conn.close()
        assert columns == ["url", "timestamp", "data", "content_type"]
        assert version == 1


class TestTileCacheWithSQLite:

    @pytest.mark.asyncio
    async def test_default_store_round_trip(self, tmp_path):
        options = CacheOptions(cache_dir=str(tmp_path), tile_url="http://{s}.tiles.test/{z}/{x}/{y}.png")
        upgrades = []
        fetcher = FakeFetcher()

        async with TileCache(options, fetcher=fetcher) as tile_cache:
            tile_cache.on(EVENT_UPGRADE_NEEDED, upgrades.append)
            assert isinstance(tile_cache.store, SQLiteTileStore)

            coord = TileCoordinate(x=0, y=0, z=0)
            downloaded = await tile_cache.download(coord)
            stored = await tile_cache.get_entry(coord)
            assert stored == downloaded

            await tile_cache.purge()
            with pytest.raises(NotFoundError):
                await tile_cache.get_entry(coord)

        # Listener was registered after open
        assert upgrades == []

    @pytest.mark.asyncio
    async def test_init_error_is_emitted(self, tmp_path):
        await make_store(tmp_path, version=3).open()
        options = CacheOptions(cache_dir=str(tmp_path), database_version=1)
        tile_cache = TileCache(options, fetcher=FakeFetcher())
        errors = []
        tile_cache.on(EVENT_ERROR, errors.append)

        with pytest.raises(StoreInitError):
            await tile_cache.get_entry(TileCoordinate(x=0, y=0, z=0))

        assert len(errors) == 1
        assert isinstance(errors[0], StoreInitError)
