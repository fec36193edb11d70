from abc import ABC, abstractmethod

from tile_cache.models.tile import FetchResponse


class ITileFetcher(ABC):
    """Interface for tile downloads over HTTP"""

    @abstractmethod
    async def fetch(self, url: str) -> FetchResponse:
        """Fetch a url, raising FetchError on any failure"""
        pass
