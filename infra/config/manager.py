"""
Config file loading and persistence.

The config lives at {config_root}/config.yaml. Missing file -> defaults.
"""

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from infra.errors import ConfigError
from .schemas import InkwellConfig


CONFIG_FILENAME = "config.yaml"


class ConfigManager:
    """
    Usage:
        manager = ConfigManager(config_root)
        config = manager.load()
        manager.update({"ocr_concurrency": 8})
    """

    def __init__(self, config_root: Path):
        self.config_root = Path(config_root).expanduser().resolve()
        self.config_path = self.config_root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.exists()

    def _read(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_path} must contain a mapping")
        return data

    def load(self) -> InkwellConfig:
        data = self._read()
        try:
            return InkwellConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {self.config_path}:\n{e}") from e

    def save(self, config: InkwellConfig) -> None:
        self.config_root.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def update(self, updates: Dict[str, Any]) -> InkwellConfig:
        """
        Merge updates into the stored config and persist the result.

        Nested sections merge key by key: {"retry": {"jitter_seconds": 0}}
        keeps the stored backoff_cap_seconds.
        """
        data = self._read()
        for key, value in updates.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

        try:
            config = InkwellConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config update:\n{e}") from e

        self.save(config)
        return config


def apply_overrides(config: InkwellConfig, overrides: Dict[str, Any]) -> InkwellConfig:
    """Validated copy of config with command-line values applied. None values are ignored."""
    data = config.model_dump()
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value

    try:
        return InkwellConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid option:\n{e}") from e
