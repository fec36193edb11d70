import json
import os
from typing import Dict, Any, Optional

from tile_cache.models.cache_options import CacheOptions
from tile_cache.exceptions.tile_cache_exceptions import ConfigurationError, ValidationError

OPTION_KEYS = (
    'database_name', 'database_version', 'object_store_name', 'tile_url',
    'tile_url_sub_domains', 'crawl_delay_ms', 'max_age_ms', 'cache_dir',
    'timeout', 'retry_attempts', 'headers',
)


class ConfigService:
    """Service for loading and validating configuration"""

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Load configuration from JSON file, an empty config when no path is given"""
        if config_path is None:
            return {}

        if not os.path.exists(config_path):
            raise ConfigurationError(f"Config file {config_path} not found!")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error loading config: {e}") from e

        self.validate_config(config)
        return config

    def validate_config(self, config: Dict[str, Any]) -> bool:
        """Validate configuration structure"""
        if not isinstance(config, dict):
            raise ValidationError("Configuration must be a JSON object")

        if 'tile_url_sub_domains' in config and not isinstance(config['tile_url_sub_domains'], list):
            raise ValidationError("tile_url_sub_domains must be a list")

        if 'headers' in config and not isinstance(config['headers'], dict):
            raise ValidationError("headers must be a dictionary")

        if 'logging' in config and not isinstance(config['logging'], dict):
            raise ValidationError("logging must be a dictionary")

        for key in ('database_version', 'crawl_delay_ms', 'max_age_ms', 'retry_attempts'):
            if key in config and (isinstance(config[key], bool) or not isinstance(config[key], int)):
                raise ValidationError(f"{key} must be an integer")

        return True

    def build_options(self, config: Dict[str, Any]) -> CacheOptions:
        """Convert configuration to CacheOptions; missing keys take the defaults"""
        values = {key: config[key] for key in OPTION_KEYS if key in config}
        return CacheOptions(**values)
