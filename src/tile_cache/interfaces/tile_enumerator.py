from abc import ABC, abstractmethod
from typing import List, Sequence

from tile_cache.models.tile import TileCoordinate


class ITileEnumerator(ABC):
    """Interface for bounding box to tile list conversion"""

    @abstractmethod
    def tiles_in_bbox(self, bbox: Sequence[float], max_zoom: int, min_zoom: int = 0,
                      tms: bool = False) -> List[TileCoordinate]:
        """Ordered, deterministic list of tiles covering bbox for every zoom in [min_zoom, max_zoom]"""
        pass
