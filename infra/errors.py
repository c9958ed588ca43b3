"""
Error taxonomy for the conversion pipeline.

Only TransientBackendError is recovered locally (by RetryPolicy).
Everything else propagates to the caller.
"""

from typing import Optional


class InkwellError(Exception):
    pass


class ConfigError(InkwellError):
    pass


class DocumentNotFound(InkwellError, FileNotFoundError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Document not found: {path}")


class FileNotFound(InkwellError, FileNotFoundError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"File not found: {path}")


class MetadataUnavailable(InkwellError):
    pass


class RasterizationFailure(InkwellError):
    def __init__(self, message: str, missing_pages: Optional[list] = None):
        self.missing_pages = missing_pages or []
        super().__init__(message)


class WorkspaceCleanupFailure(InkwellError):
    pass


class CredentialsUnavailable(InkwellError):
    pass


class BackendError(InkwellError):
    """Raised by an ExtractionBackend. `status_code` is None for transport errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class TransientBackendError(BackendError):
    """Rate limit, transport or server-side failure. Retried forever."""


class PermanentBackendError(BackendError):
    """Auth, not-found or bad-request failure. Never retried."""


class OutputCollision(InkwellError):
    """Two input files would write the same output file."""

    def __init__(self, collisions: dict):
        self.collisions = collisions
        details = "; ".join(
            f"{target} <- {', '.join(str(p) for p in sources)}"
            for target, sources in collisions.items()
        )
        super().__init__(f"Output files collide: {details}")
