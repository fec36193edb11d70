from dataclasses import dataclass, field
from typing import Sequence


@dataclass(frozen=True)
class TileCoordinate:
    """Raster tile address (column, row, zoom)"""
    x: int
    y: int
    z: int

    @classmethod
    def from_zxy(cls, zxy: Sequence[int]) -> "TileCoordinate":
        """Build a coordinate from a (zoom, x, y) triple"""
        zoom, x, y = zxy
        return cls(x=int(x), y=int(y), z=int(zoom))

    def as_zxy(self) -> str:
        return f"{self.z}/{self.x}/{self.y}"


@dataclass
class CacheEntry:
    """Data model for a stored tile

    `url` is the internal key: the tile URL with the sub-domain placeholder
    still in place, so every mirror maps onto the same entry.
    """
    url: str
    timestamp: int
    data: bytes = field(repr=False)
    content_type: str = ""


@dataclass(frozen=True)
class SeedProgress:
    """Payload of the seed-progress event"""
    total: int
    remains: int


@dataclass(frozen=True)
class FetchResponse:
    """Body and content type returned by a fetcher"""
    data: bytes = field(repr=False)
    content_type: str = ""


@dataclass(frozen=True)
class UpgradeEvent:
    """Payload of the upgrade-needed event"""
    database_name: str
    store_name: str
    old_version: int
    new_version: int


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box in degrees"""
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @classmethod
    def from_list(cls, bbox: Sequence[float]) -> "BoundingBox":
        """Build from [min_lon, min_lat, max_lon, max_lat]"""
        if isinstance(bbox, BoundingBox):
            return bbox
        min_lon, min_lat, max_lon, max_lat = (float(v) for v in bbox)
        return cls(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)
