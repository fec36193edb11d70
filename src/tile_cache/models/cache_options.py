from dataclasses import dataclass, field
from typing import Dict, Tuple

from tile_cache.constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CRAWL_DELAY_MS,
    DEFAULT_DATABASE_NAME,
    DEFAULT_DATABASE_VERSION,
    DEFAULT_MAX_AGE_MS,
    DEFAULT_OBJECT_STORE_NAME,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TILE_URL,
    DEFAULT_TILE_URL_SUB_DOMAINS,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from tile_cache.exceptions.tile_cache_exceptions import ValidationError

SUB_DOMAIN_PLACEHOLDER = "{s}"


def _default_headers() -> Dict[str, str]:
    return {"User-Agent": DEFAULT_USER_AGENT}


def _is_int(value) -> bool:
    # bool is an int subclass but never a valid count
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return _is_int(value) or isinstance(value, float)


@dataclass(frozen=True)
class CacheOptions:
    """Data model for cache configuration, read-only once the cache is built"""
    database_name: str = DEFAULT_DATABASE_NAME
    database_version: int = DEFAULT_DATABASE_VERSION
    object_store_name: str = DEFAULT_OBJECT_STORE_NAME
    tile_url: str = DEFAULT_TILE_URL
    tile_url_sub_domains: Tuple[str, ...] = DEFAULT_TILE_URL_SUB_DOMAINS
    crawl_delay_ms: int = DEFAULT_CRAWL_DELAY_MS
    max_age_ms: int = DEFAULT_MAX_AGE_MS
    cache_dir: str = DEFAULT_CACHE_DIR
    timeout: float = DEFAULT_TIMEOUT
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    headers: Dict[str, str] = field(default_factory=_default_headers)

    def __post_init__(self):
        if not isinstance(self.tile_url_sub_domains, (list, tuple)):
            raise ValidationError(
                f"tile_url_sub_domains must be a list of strings, got {self.tile_url_sub_domains!r}")
        if not isinstance(self.headers, dict):
            raise ValidationError(f"headers must be a dictionary, got {self.headers!r}")
        # Lists from JSON are frozen into a tuple so the options stay immutable
        object.__setattr__(self, "tile_url_sub_domains", tuple(self.tile_url_sub_domains))
        object.__setattr__(self, "headers", dict(self.headers))
        self.validate()

    def validate(self) -> None:
        """Validate option values"""
        for name in ("database_name", "object_store_name", "tile_url", "cache_dir"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValidationError(f"{name} must be a non-empty string, got {value!r}")
        if not all(isinstance(s, str) and s for s in self.tile_url_sub_domains):
            raise ValidationError(
                f"tile_url_sub_domains must contain non-empty strings, got {list(self.tile_url_sub_domains)!r}")
        if not _is_int(self.database_version) or self.database_version < 1:
            raise ValidationError(f"database_version must be a positive integer, got {self.database_version!r}")
        if not _is_int(self.crawl_delay_ms) or self.crawl_delay_ms < 0:
            raise ValidationError(f"crawl_delay_ms must be an integer >= 0, got {self.crawl_delay_ms!r}")
        if not _is_int(self.max_age_ms) or self.max_age_ms < 0:
            raise ValidationError(f"max_age_ms must be an integer >= 0, got {self.max_age_ms!r}")
        if not _is_int(self.retry_attempts) or self.retry_attempts < 0:
            raise ValidationError(f"retry_attempts must be an integer >= 0, got {self.retry_attempts!r}")
        if not _is_number(self.timeout) or self.timeout <= 0:
            raise ValidationError(f"timeout must be a number > 0, got {self.timeout!r}")
        if SUB_DOMAIN_PLACEHOLDER in self.tile_url and not self.tile_url_sub_domains:
            raise ValidationError(
                f"tile_url {self.tile_url!r} contains {SUB_DOMAIN_PLACEHOLDER} but no sub domains are configured"
            )

    def to_dict(self) -> Dict:
        return {
            "database_name": self.database_name,
            "database_version": self.database_version,
            "object_store_name": self.object_store_name,
            "tile_url": self.tile_url,
            "tile_url_sub_domains": list(self.tile_url_sub_domains),
            "crawl_delay_ms": self.crawl_delay_ms,
            "max_age_ms": self.max_age_ms,
            "cache_dir": self.cache_dir,
            "timeout": self.timeout,
            "retry_attempts": self.retry_attempts,
            "headers": dict(self.headers),
        }
