import asyncio
import time
from typing import List, Optional, Sequence

import pytest

from tile_cache.adapters.memory_store_adapter import MemoryTileStore
from tile_cache.core.tile_cache import TileCache
from tile_cache.exceptions.tile_cache_exceptions import FetchError
from tile_cache.infrastructure.event_bus import EventBus
from tile_cache.interfaces.tile_fetcher import ITileFetcher
from tile_cache.models.cache_options import CacheOptions
from tile_cache.models.tile import FetchResponse

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"tile-body"
TEST_TILE_URL = "http://{s}.tiles.test/{z}/{x}/{y}.png"


class FakeFetcher(ITileFetcher):
    """Counts fetches and records their start and end times"""

    def __init__(self, data: bytes = PNG_BYTES, content_type: str = "image/png",
                 fail: bool = False, fail_on: Sequence[str] = ()):
        self.data = data
        self.content_type = content_type
        self.fail = fail
        self.fail_on = list(fail_on)
        self.calls: List[str] = []
        self.started: List[float] = []
        self.finished: List[float] = []

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        self.started.append(time.monotonic())
        await asyncio.sleep(0)
        if self.fail or any(part in url for part in self.fail_on):
            raise FetchError(f"Failed to download {url}: HTTP 503", url=url, status=503)
        self.finished.append(time.monotonic())
        return FetchResponse(data=self.data, content_type=self.content_type)


class FixedClock:
    """Callable clock returning a settable epoch-ms value"""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def first_sub_domain(sub_domains: Sequence[str]) -> str:
    return sub_domains[0]


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def options() -> CacheOptions:
    return CacheOptions(tile_url=TEST_TILE_URL, crawl_delay_ms=0, max_age_ms=1000)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def store() -> MemoryTileStore:
    return MemoryTileStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def cache(options, store, fetcher, clock, events) -> TileCache:
    return TileCache(
        options=options,
        store=store,
        fetcher=fetcher,
        events=events,
        clock=clock,
        choose_sub_domain=first_sub_domain,
        sleep=no_sleep,
    )
