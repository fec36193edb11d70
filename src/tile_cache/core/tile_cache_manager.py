import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from tile_cache.constants import EVENT_SEED_PROGRESS
from tile_cache.core.tile_cache import TileCache
from tile_cache.models.tile import SeedProgress, TileCoordinate
from tile_cache.services.config_service import ConfigService
from tile_cache.utils.tile_calculator import TileCalculator

logger = logging.getLogger(__name__)


class TileCacheManager:
    """Main manager class for command-line cache operations"""

    def __init__(self, config_path: Optional[str] = None, config: Optional[Dict[str, Any]] = None,
                 cache: Optional[TileCache] = None):
        self.config_service = ConfigService()
        self.config = config if config is not None else self.config_service.load_config(config_path)
        self.options = cache.options if cache is not None else self.config_service.build_options(self.config)
        self.cache = cache or TileCache(self.options)

    def show_config(self) -> None:
        """Print the effective cache options"""
        print(json.dumps(self.options.to_dict(), indent=2))

    def _print_progress(self, progress: SeedProgress) -> None:
        done = progress.total - progress.remains
        print(f"  [{done}/{progress.total}] {progress.remains} remaining")

    async def seed(self, bbox: List[float], min_zoom: int, max_zoom: int, tms: bool = False) -> int:
        """Seed a bounding box and report progress"""
        total = TileCalculator.calculate_tile_count(bbox, max_zoom, min_zoom)
        print(f"=== Seeding {self.options.object_store_name} ===")
        print(f"Bounding Box: {bbox}")
        print(f"Zoom Levels: {min_zoom} to {max_zoom}")
        print(f"Total tiles: {total}")
        print(f"Crawl delay: {self.options.crawl_delay_ms} ms")

        unsubscribe = self.cache.on(EVENT_SEED_PROGRESS, self._print_progress)
        try:
            elapsed = await self.cache.seed_bbox(bbox, max_zoom, min_zoom, tms)
        finally:
            unsubscribe()
        print(f"Seeding finished in {elapsed / 1000.0:.1f} s")
        return elapsed

    async def save_tile(self, coord: TileCoordinate, output_path: str) -> int:
        """Write tile bytes to output_path, returns the number of bytes written"""
        data = await self.cache.get_as_bytes(coord)
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        print(f"Saved {coord.as_zxy()} to {path} ({len(data)} bytes)")
        return len(data)

    async def print_data_url(self, coord: TileCoordinate) -> str:
        data_url = await self.cache.get_as_data_url(coord)
        print(data_url)
        return data_url

    async def purge(self) -> None:
        await self.cache.purge()
        print(f"Purged store {self.options.object_store_name!r} of database {self.options.database_name!r}")

    async def _run(self, args: argparse.Namespace) -> None:
        async with self.cache:
            if args.purge:
                await self.purge()
            elif args.seed:
                await self.seed(args.bbox, args.min_zoom, args.max_zoom, args.tms)
            elif args.get:
                await self.save_tile(TileCoordinate.from_zxy(args.get), args.output)
            elif args.data_url:
                await self.print_data_url(TileCoordinate.from_zxy(args.data_url))

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description='Cache map tiles locally, refresh outdated ones and seed bounding boxes.',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                'Examples:\n\n'
                '1) Seed a BBOX (lon/lat order) for zoom 10 to 12:\n'
                '   tile-cache --seed --bbox 28.5 40.8 29.5 41.2 --min-zoom 10 --max-zoom 12\n\n'
                '2) Write one tile to a file (downloaded if not cached):\n'
                '   tile-cache --get 3 4 2 --output tile.png\n\n'
                '3) Print a tile as data url:\n'
                '   tile-cache --data-url 0 0 0\n\n'
                '4) Remove all cached tiles:\n'
                '   tile-cache --purge\n\n'
                'Notes:\n'
                '- Options are read from the JSON file given with --config (see config.example.json).\n'
                '- Cached tiles are stored in <cache_dir>/<database_name>.sqlite'
            )
        )
        parser.add_argument('--config', help='Path to JSON configuration file')
        parser.add_argument('--seed', action='store_true', help='Seed all tiles in --bbox')
        parser.add_argument('--bbox', nargs=4, type=float, metavar=('min_lon', 'min_lat', 'max_lon', 'max_lat'),
                            help='BBOX to seed (lon/lat)')
        parser.add_argument('--min-zoom', type=int, default=0, help='Minimum zoom level (default: 0)')
        parser.add_argument('--max-zoom', type=int, help='Maximum zoom level')
        parser.add_argument('--tms', action='store_true', help='Use TMS row numbering while seeding')
        parser.add_argument('--get', nargs=3, type=int, metavar=('z', 'x', 'y'), help='Fetch a tile and save it')
        parser.add_argument('--output', help='Output file for --get')
        parser.add_argument('--data-url', nargs=3, type=int, metavar=('z', 'x', 'y'),
                            help='Print a tile as base64 data url')
        parser.add_argument('--purge', action='store_true', help='Remove every cached tile')
        parser.add_argument('--show-config', action='store_true', help='Print effective options')
        return parser

    @classmethod
    def from_arguments(cls, argv: Optional[Sequence[str]] = None):
        """Parse arguments and build a manager from the given --config"""
        parser = cls.build_parser()
        args = parser.parse_args(argv)

        if args.seed and (args.bbox is None or args.max_zoom is None):
            parser.error('--seed requires --bbox and --max-zoom')
        if args.get and not args.output:
            parser.error('--get requires --output')
        if args.max_zoom is not None and args.min_zoom > args.max_zoom:
            parser.error('--min-zoom cannot be greater than --max-zoom')

        return cls(config_path=args.config), args, parser

    def run(self, args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        if args.show_config:
            self.show_config()
            return

        if not (args.purge or args.seed or args.get or args.data_url):
            parser.print_help()
            return

        asyncio.run(self._run(args))
