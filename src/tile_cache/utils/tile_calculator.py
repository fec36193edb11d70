import math
from typing import List, Sequence, Tuple

from tile_cache.interfaces.tile_enumerator import ITileEnumerator
from tile_cache.models.tile import BoundingBox, TileCoordinate

# Web Mercator latitude limit
MAX_LATITUDE = 85.0511287798


class TileCalculator(ITileEnumerator):
    """Utility class for tile coordinate calculations"""

    @staticmethod
    def deg2num(lat_deg: float, lon_deg: float, zoom: int) -> Tuple[int, int]:
        """Convert lat/lon to tile coordinates, clamped to the tile grid"""
        lat_deg = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat_deg))
        lat_rad = math.radians(lat_deg)
        n = 2 ** zoom
        xtile = int((lon_deg + 180.0) / 360.0 * n)
        ytile = int((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
        return min(max(xtile, 0), n - 1), min(max(ytile, 0), n - 1)

    @staticmethod
    def get_tiles_for_bbox(bbox: Sequence[float], max_zoom: int, min_zoom: int = 0,
                           tms: bool = False) -> List[TileCoordinate]:
        """Get all tile coordinates for given bbox and zoom range.

        Ordered by zoom, then column, then row. With tms the row index is
        flipped to the TMS scheme.
        """
        if min_zoom > max_zoom:
            return []

        box = BoundingBox.from_list(bbox)
        tiles = []

        for zoom in range(min_zoom, max_zoom + 1):
            n = 2 ** zoom
            min_x, max_y = TileCalculator.deg2num(box.min_lat, box.min_lon, zoom)
            max_x, min_y = TileCalculator.deg2num(box.max_lat, box.max_lon, zoom)

            for x in range(min_x, max_x + 1):
                for y in range(min_y, max_y + 1):
                    row = n - 1 - y if tms else y
                    tiles.append(TileCoordinate(x=x, y=row, z=zoom))

        return tiles

    @staticmethod
    def calculate_tile_count(bbox: Sequence[float], max_zoom: int, min_zoom: int = 0) -> int:
        """Calculate total number of tiles for given bbox and zoom range"""
        return len(TileCalculator.get_tiles_for_bbox(bbox, max_zoom, min_zoom))

    def tiles_in_bbox(self, bbox: Sequence[float], max_zoom: int, min_zoom: int = 0,
                      tms: bool = False) -> List[TileCoordinate]:
        return self.get_tiles_for_bbox(bbox, max_zoom, min_zoom, tms)
