"""
Configuration management for inkwell.

Usage:
    from infra.config import get_config, ConfigManager

    config = get_config()            # cached, from $INKWELL_CONFIG_ROOT/config.yaml
    manager = ConfigManager(root)
    manager.update({"dpi": 300})
"""

from .schemas import (
    InkwellConfig,
    RetryConfig,
    DriveConfig,
    SUPPORTED_FORMATS,
    SUPPORTED_PROCESSORS,
    DEFAULT_PAGE_SEPARATOR,
    default_file_concurrency,
    resolve_env_vars,
)

from .manager import ConfigManager, CONFIG_FILENAME, apply_overrides

from .runtime import get_config, get_config_root, reload_config


__all__ = [
    "InkwellConfig",
    "RetryConfig",
    "DriveConfig",
    "SUPPORTED_FORMATS",
    "SUPPORTED_PROCESSORS",
    "DEFAULT_PAGE_SEPARATOR",
    "default_file_concurrency",
    "resolve_env_vars",
    "ConfigManager",
    "CONFIG_FILENAME",
    "apply_overrides",
    "get_config",
    "get_config_root",
    "reload_config",
]
