"""
Runtime configuration access.

INKWELL_CONFIG_ROOT locates config.yaml (default ~/.config/inkwell).
A .env file in the working directory is loaded first, so secrets referenced
as ${ENV_VAR} in config.yaml can live there.
"""

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from .manager import ConfigManager
from .schemas import InkwellConfig

load_dotenv()


def get_config_root() -> Path:
    return Path(os.getenv('INKWELL_CONFIG_ROOT', '~/.config/inkwell')).expanduser().resolve()


@lru_cache(maxsize=1)
def get_config() -> InkwellConfig:
    """Load and cache the configuration (defaults if config.yaml doesn't exist)."""
    return ConfigManager(get_config_root()).load()


def reload_config() -> InkwellConfig:
    get_config.cache_clear()
    return get_config()
