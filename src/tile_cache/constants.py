"""Default values for cache options"""

DEFAULT_DATABASE_NAME = "tile-cache-data"
DEFAULT_DATABASE_VERSION = 1
DEFAULT_OBJECT_STORE_NAME = "OSM"
DEFAULT_TILE_URL = "http://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
DEFAULT_TILE_URL_SUB_DOMAINS = ("a", "b", "c")

# Delay between downloads while seeding
DEFAULT_CRAWL_DELAY_MS = 500
# One week
DEFAULT_MAX_AGE_MS = 1000 * 60 * 60 * 24 * 7

DEFAULT_CACHE_DIR = "tile_cache_data"
DEFAULT_TIMEOUT = 30
DEFAULT_RETRY_ATTEMPTS = 0
DEFAULT_USER_AGENT = "tile-cache/0.3.0"

# Event names
EVENT_UPGRADE_NEEDED = "upgrade-needed"
EVENT_ERROR = "error"
EVENT_SEED_PROGRESS = "seed-progress"

NOT_FOUND_MESSAGE = "Unable to find entry"
