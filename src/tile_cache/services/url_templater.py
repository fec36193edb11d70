import random
from typing import Callable, Optional, Sequence

from tile_cache.models.tile import TileCoordinate

SubDomainChooser = Callable[[Sequence[str]], str]


def internal_key(coord: TileCoordinate, template: str) -> str:
    """Fill {x}, {y}, {-y} and {z} into template, keeping {s}.

    {-y} gets the plain y value; flipping rows is left to whoever builds
    the coordinate so the key does not depend on the tiling scheme.
    """
    return (template
            .replace("{x}", str(coord.x))
            .replace("{y}", str(coord.y))
            .replace("{-y}", str(coord.y))
            .replace("{z}", str(coord.z)))


class UrlTemplater:
    """Builds cache keys and request urls from a tile url template"""

    def __init__(self, template: str, sub_domains: Sequence[str],
                 choose_sub_domain: Optional[SubDomainChooser] = None):
        self.template = template
        self.sub_domains = tuple(sub_domains)
        self._choose = choose_sub_domain or random.choice

    def internal_key(self, coord: TileCoordinate) -> str:
        return internal_key(coord, self.template)

    def dispatch_url(self, coord: TileCoordinate) -> str:
        """Internal key with {s} replaced by a sub domain picked by the chooser"""
        key = self.internal_key(coord)
        if "{s}" not in key:
            return key
        return key.replace("{s}", self._choose(self.sub_domains))
