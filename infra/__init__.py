from infra.config import InkwellConfig, get_config
from infra.errors import (
    InkwellError,
    ConfigError,
    DocumentNotFound,
    FileNotFound,
    MetadataUnavailable,
    RasterizationFailure,
    OutputCollision,
    WorkspaceCleanupFailure,
    CredentialsUnavailable,
    BackendError,
    TransientBackendError,
    PermanentBackendError,
)

from infra.logger import (
    PipelineLogger,
    create_logger,
)

from infra.progress import ProgressEvent, ProgressSink, ProgressTracker, Stage
from infra.retry import RetryPolicy
from infra.work_queue import WorkQueue
from infra.workspace import EphemeralWorkspace

__all__ = [
    "InkwellConfig",
    "get_config",

    "InkwellError",
    "ConfigError",
    "DocumentNotFound",
    "FileNotFound",
    "MetadataUnavailable",
    "RasterizationFailure",
    "OutputCollision",
    "WorkspaceCleanupFailure",
    "CredentialsUnavailable",
    "BackendError",
    "TransientBackendError",
    "PermanentBackendError",

    "PipelineLogger",
    "create_logger",

    "ProgressEvent",
    "ProgressSink",
    "ProgressTracker",
    "Stage",
    "RetryPolicy",
    "WorkQueue",
    "EphemeralWorkspace",
]
