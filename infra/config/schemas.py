"""
Configuration schemas for inkwell.

Stored at {config_root}/config.yaml. Every field has a default, so an
empty or missing file yields a working configuration.
"""

import multiprocessing
import os
import re
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

SUPPORTED_FORMATS = ("txt", "json", "docx")
SUPPORTED_PROCESSORS = ("google_drive",)
DEFAULT_PAGE_SEPARATOR = "\n\nPAGE_SEPARATOR\n\n"
DEFAULT_EXTENSIONS = ["pdf", "jpg", "jpeg", "png"]


def default_file_concurrency() -> int:
    return max(multiprocessing.cpu_count() - 2, 2)


class RetryConfig(BaseModel):
    """Backoff for transient extraction failures (retries never stop)."""
    backoff_cap_seconds: float = Field(
        default=60.0, gt=0, description="Upper bound of the exponential part of a wait"
    )
    jitter_seconds: float = Field(
        default=1.0, ge=0, description="Random extra wait in [0, jitter)"
    )

    model_config = {"frozen": True}


class DriveConfig(BaseModel):
    """Google Drive extraction backend settings."""
    access_token: str = Field(
        default="${INKWELL_DRIVE_TOKEN}",
        description="OAuth bearer token (supports ${ENV_VAR} syntax)"
    )
    token_file: Optional[Path] = Field(
        default=None,
        description="Authorized-user JSON written by an external OAuth flow"
    )
    timeout_seconds: float = Field(default=120.0, gt=0)

    @field_validator('token_file')
    @classmethod
    def expand_token_file(cls, v: Optional[Path]) -> Optional[Path]:
        return Path(v).expanduser() if v is not None else None

    def resolved_access_token(self) -> str:
        return resolve_env_vars(self.access_token).strip()

    model_config = {"frozen": True}


class InkwellConfig(BaseModel):
    dpi: int = Field(default=150, gt=0, description="Rasterization resolution")
    ocr_concurrency: int = Field(
        default=12, ge=1, description="Concurrent extraction workers per document"
    )
    file_concurrency: int = Field(
        default_factory=default_file_concurrency,
        ge=1,
        description="Documents converted at the same time by the CLI"
    )
    render_reserve: int = Field(
        default=2, ge=0, description="CPUs left free when sizing the render pool"
    )
    strict_render: bool = Field(
        default=False,
        description="Fail when a page could not be rendered instead of skipping it"
    )
    processor: str = Field(default="google_drive", description="Extraction backend")
    formats: List[str] = Field(default_factory=lambda: ["txt"])
    page_separator: str = DEFAULT_PAGE_SEPARATOR
    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    log_dir: Optional[Path] = Field(
        default=None, description="Directory for JSONL logs (disabled when unset)"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    drive: DriveConfig = Field(default_factory=DriveConfig)

    @field_validator('formats')
    @classmethod
    def validate_formats(cls, v: List[str]) -> List[str]:
        formats = [f.strip().lower() for f in v if f.strip()]
        unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(
                f"Unknown output format(s): {', '.join(unknown)}. "
                f"Supported: {', '.join(SUPPORTED_FORMATS)}"
            )
        if not formats:
            raise ValueError("At least one output format is required")
        return list(dict.fromkeys(formats))

    @field_validator('processor')
    @classmethod
    def validate_processor(cls, v: str) -> str:
        processor = v.strip().lower()
        if processor not in SUPPORTED_PROCESSORS:
            raise ValueError(
                f"Unknown processor: {v}. Supported: {', '.join(SUPPORTED_PROCESSORS)}"
            )
        return processor

    @field_validator('extensions')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [e.strip().lower().lstrip('.') for e in v if e.strip()]

    @field_validator('log_dir')
    @classmethod
    def expand_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        return Path(v).expanduser() if v is not None else None

    model_config = {
        "frozen": True,
        "validate_assignment": True
    }


def resolve_env_vars(value: str) -> str:
    """
    Resolve ${ENV_VAR} references in a string.

    Examples:
        "${INKWELL_DRIVE_TOKEN}" -> actual value from environment
        "literal-value" -> "literal-value"
        "${MISSING_VAR}" -> "" (empty string if not set)
    """
    if not isinstance(value, str):
        return value

    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        return os.environ.get(match.group(1), "")

    return re.sub(pattern, replace, value)
