#!/usr/bin/env python3
"""
Tile Cache - command-line entry point
"""

import sys
import logging
from typing import Optional, Sequence

from tile_cache.core.tile_cache_manager import TileCacheManager
from tile_cache.exceptions.tile_cache_exceptions import TileCacheException
from tile_cache.infrastructure.logging import LoggingManager


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the tile cache application"""
    try:
        manager, args, parser = TileCacheManager.from_arguments(argv)

        LoggingManager.setup_logging(manager.config)
        logger = logging.getLogger(__name__)
        logger.info("Starting tile cache")

        manager.run(args, parser)

    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(1)
    except TileCacheException as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
