import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Sequence

from tile_cache.constants import EVENT_SEED_PROGRESS
from tile_cache.infrastructure.event_bus import EventBus
from tile_cache.interfaces.tile_enumerator import ITileEnumerator
from tile_cache.models.tile import CacheEntry, SeedProgress, TileCoordinate
from tile_cache.utils.clock import now_ms

logger = logging.getLogger(__name__)


class SeedScheduler:
    """Downloads every tile of a bounding box, one at a time.

    A seed-progress event goes out before each tile is taken from the queue
    and once more when the queue is empty. After each successful download
    the scheduler waits crawl_delay_ms. The first failed download aborts the
    whole run and is re-raised.
    """

    def __init__(self,
                 download: Callable[[TileCoordinate], Awaitable[CacheEntry]],
                 enumerator: ITileEnumerator,
                 events: EventBus,
                 crawl_delay_ms: int,
                 clock: Callable[[], int] = now_ms,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._download = download
        self._enumerator = enumerator
        self._events = events
        self.crawl_delay_ms = crawl_delay_ms
        self._clock = clock
        self._sleep = sleep

    async def seed_bbox(self, bbox: Sequence[float], max_zoom: int, min_zoom: int = 0,
                        tms: bool = False) -> int:
        """Seed bbox for zoom levels min_zoom..max_zoom, returns elapsed milliseconds"""
        start = self._clock()
        queue = deque(self._enumerator.tiles_in_bbox(bbox, max_zoom, min_zoom, tms))
        total = len(queue)
        logger.info("Seeding %d tiles for bbox %s, zoom %d-%d", total, bbox, min_zoom, max_zoom)

        while True:
            self._events.emit(EVENT_SEED_PROGRESS, SeedProgress(total=total, remains=len(queue)))
            if not queue:
                break
            coord = queue.popleft()
            try:
                await self._download(coord)
            except Exception:
                logger.error("Seeding aborted at tile %s with %d tiles left", coord.as_zxy(), len(queue))
                raise
            await self._sleep(self.crawl_delay_ms / 1000.0)

        elapsed = self._clock() - start
        logger.info("Seeded %d tiles in %d ms", total, elapsed)
        return elapsed
