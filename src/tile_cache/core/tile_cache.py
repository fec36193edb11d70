import asyncio
import base64
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, TypeVar, Union

from tile_cache.adapters.sqlite_store_adapter import SQLiteTileStore
from tile_cache.constants import (
    EVENT_ERROR,
    EVENT_UPGRADE_NEEDED,
    NOT_FOUND_MESSAGE,
)
from tile_cache.infrastructure.event_bus import EventBus
from tile_cache.interfaces.tile_enumerator import ITileEnumerator
from tile_cache.interfaces.tile_fetcher import ITileFetcher
from tile_cache.interfaces.tile_store import ITileStore
from tile_cache.models.cache_options import CacheOptions
from tile_cache.models.tile import CacheEntry, TileCoordinate, UpgradeEvent
from tile_cache.services.fetch_service import RequestsTileFetcher
from tile_cache.services.freshness_policy import Freshness, FreshnessPolicy
from tile_cache.services.seed_scheduler import SeedScheduler
from tile_cache.services.url_templater import SubDomainChooser, UrlTemplater
from tile_cache.utils.clock import now_ms
from tile_cache.utils.tile_calculator import TileCalculator
from tile_cache.exceptions.tile_cache_exceptions import (
    FetchError,
    NotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Coordinate = Union[TileCoordinate, Mapping[str, int]]


def _as_coordinate(coord: Coordinate) -> TileCoordinate:
    if isinstance(coord, TileCoordinate):
        return coord
    return TileCoordinate(x=int(coord["x"]), y=int(coord["y"]), z=int(coord["z"]))


class TileCache:
    """Spatial tile cache on top of a persistent key/value store.

    Entries are keyed by the tile url with the sub-domain placeholder left
    in, so downloads from different mirrors share one entry. Entries older
    than ``max_age_ms`` are refreshed on read; if the refresh fails the old
    entry is served instead.

    Store failures are emitted on the ``error`` event and raised to the
    caller of the operation that hit them. ``upgrade-needed`` fires when the
    store schema is created, ``seed-progress`` while seeding.

    Usage:
        async with TileCache(CacheOptions(cache_dir="cache")) as cache:
            data = await cache.get_as_bytes(TileCoordinate(x=0, y=0, z=0))
    """

    def __init__(self,
                 options: Optional[CacheOptions] = None,
                 store: Optional[ITileStore] = None,
                 fetcher: Optional[ITileFetcher] = None,
                 enumerator: Optional[ITileEnumerator] = None,
                 events: Optional[EventBus] = None,
                 clock: Optional[Callable[[], int]] = None,
                 choose_sub_domain: Optional[SubDomainChooser] = None,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        self.options = options or CacheOptions()
        self.events = events or EventBus()
        self.store = store or SQLiteTileStore(
            cache_dir=self.options.cache_dir,
            database_name=self.options.database_name,
            database_version=self.options.database_version,
            store_name=self.options.object_store_name,
        )
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RequestsTileFetcher(
            headers=self.options.headers,
            timeout=self.options.timeout,
            retry_attempts=self.options.retry_attempts,
        )
        self.enumerator = enumerator or TileCalculator()
        self._clock = clock or now_ms

        self.templater = UrlTemplater(self.options.tile_url, self.options.tile_url_sub_domains,
                                      choose_sub_domain)
        self.policy = FreshnessPolicy(self.options.max_age_ms)
        self.seeder = SeedScheduler(
            download=self.download,
            enumerator=self.enumerator,
            events=self.events,
            crawl_delay_ms=self.options.crawl_delay_ms,
            clock=self._clock,
            sleep=sleep or asyncio.sleep,
        )
        self._opening: Optional[asyncio.Future] = None

    async def __aenter__(self) -> "TileCache":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def on(self, event: str, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to upgrade-needed, error or seed-progress"""
        return self.events.subscribe(event, listener)

    async def open(self) -> None:
        """Open the store now instead of on first use"""
        if self.store.is_open:
            return
        # Concurrent first calls share one open attempt
        if self._opening is None:
            self._opening = asyncio.ensure_future(self._open_store())
        opening = self._opening
        try:
            await opening
        finally:
            # A failed or cancelled attempt lets the next call try again
            if self._opening is opening and opening.done():
                self._opening = None

    async def _open_store(self) -> None:
        try:
            await self.store.open(self._on_upgrade_needed)
        except StoreError as e:
            logger.error("Unable to open tile store: %s", e)
            self.events.emit(EVENT_ERROR, e)
            raise
        self._opening = None

    def _on_upgrade_needed(self, event: UpgradeEvent) -> None:
        logger.info("Creating store %r in database %r (version %d -> %d)", event.store_name,
                    event.database_name, event.old_version, event.new_version)
        self.events.emit(EVENT_UPGRADE_NEEDED, event)

    async def close(self) -> None:
        await self.store.close()
        if self._owns_fetcher and isinstance(self.fetcher, RequestsTileFetcher):
            self.fetcher.close()

    async def _store_call(self, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except StoreError as e:
            self.events.emit(EVENT_ERROR, e)
            raise

    def internal_key(self, coord: Coordinate) -> str:
        return self.templater.internal_key(_as_coordinate(coord))

    def dispatch_url(self, coord: Coordinate) -> str:
        return self.templater.dispatch_url(_as_coordinate(coord))

    async def get_entry(self, coord: Coordinate, download_if_missing: bool = False) -> CacheEntry:
        """Get the stored entry for a tile.

        Missing entries raise NotFoundError unless download_if_missing is set.
        Outdated entries are downloaded again; on any refresh failure the
        outdated entry is returned.
        """
        coord = _as_coordinate(coord)
        await self.open()
        key = self.templater.internal_key(coord)
        entry = await self._store_call(self.store.get(key))

        state = self.policy.classify(entry, self._clock())
        if state is Freshness.MISSING:
            if download_if_missing:
                logger.debug("Cache miss for %s, downloading", key)
                return await self.download(coord)
            raise NotFoundError(NOT_FOUND_MESSAGE)

        if state is Freshness.FRESH:
            logger.debug("Cache hit for %s", key)
            return entry

        logger.debug("Entry %s is outdated, refreshing", key)
        try:
            return await self.download(coord)
        except (FetchError, StoreError) as e:
            logger.warning("Refreshing %s failed, serving cached version: %s", key, e)
            return entry

    async def download(self, coord: Coordinate) -> CacheEntry:
        """Download a tile and store it, replacing any existing entry"""
        coord = _as_coordinate(coord)
        await self.open()
        url = self.templater.dispatch_url(coord)
        response = await self.fetcher.fetch(url)

        entry = CacheEntry(
            url=self.templater.internal_key(coord),
            timestamp=self._clock(),
            data=bytes(response.data),
            content_type=response.content_type or "",
        )
        await self._store_call(self.store.put(entry))
        logger.debug("Stored %s (%d bytes, %s)", entry.url, len(entry.data), entry.content_type)
        return entry

    async def get_as_bytes(self, coord: Coordinate) -> bytes:
        entry = await self.get_entry(coord, True)
        return entry.data

    async def get_as_data_url(self, coord: Coordinate) -> str:
        entry = await self.get_entry(coord, True)
        encoded = base64.b64encode(entry.data).decode("ascii")
        return f"data:{entry.content_type};base64,{encoded}"

    async def seed_bbox(self, bbox: Sequence[float], max_zoom: int, min_zoom: int = 0,
                        tms: bool = False) -> int:
        """Seed every tile in bbox [min_lon, min_lat, max_lon, max_lat]; returns elapsed ms"""
        await self.open()
        return await self.seeder.seed_bbox(bbox, max_zoom, min_zoom, tms)

    async def purge(self) -> None:
        """Remove every stored entry"""
        await self.open()
        await self._store_call(self.store.clear())
        logger.info("Purged store %r", self.options.object_store_name)

    async def count(self) -> int:
        await self.open()
        return await self._store_call(self.store.count())
