"""
Extraction backend registry.

Backends are selected by name (`inkwell convert --processor`, or
`processor` in config.yaml). Each registered factory builds a ready backend
from the effective configuration.

Usage:
    from infra.ocr.registry import create_backend, list_backends

    backend = create_backend("google_drive", config, token_file=path)
    available = list_backends()
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional

from infra.config import InkwellConfig
from infra.errors import ConfigError
from infra.logger import PipelineLogger
from .credentials import credentials_from_config
from .google_drive import GoogleDriveBackend
from .provider import ExtractionBackend

BackendFactory = Callable[[InkwellConfig, Optional[Path], Optional[PipelineLogger]], ExtractionBackend]

# Registry of backend factories by name
_BACKEND_REGISTRY: Dict[str, BackendFactory] = {}


def register_backend(name: str, factory: BackendFactory) -> None:
    _BACKEND_REGISTRY[name] = factory


def create_backend(
    name: str,
    config: InkwellConfig,
    token_file: Optional[Path] = None,
    logger: Optional[PipelineLogger] = None,
) -> ExtractionBackend:
    """Instantiate a backend by name.

    Raises:
        ConfigError: If no backend is registered under `name`
    """
    factory = _BACKEND_REGISTRY.get(name)
    if factory is None:
        raise ConfigError(
            f"Unknown processor: '{name}'. "
            f"Available: {', '.join(list_backends())}"
        )
    return factory(config, token_file, logger)


def list_backends() -> List[str]:
    return sorted(_BACKEND_REGISTRY.keys())


def _google_drive(config: InkwellConfig, token_file: Optional[Path], logger: Optional[PipelineLogger]) -> ExtractionBackend:
    return GoogleDriveBackend(
        credentials_from_config(config.drive, token_file=token_file),
        timeout=config.drive.timeout_seconds,
        logger=logger,
    )


register_backend("google_drive", _google_drive)
