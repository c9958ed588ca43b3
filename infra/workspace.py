import shutil
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Optional

from infra.errors import WorkspaceCleanupFailure
from infra.logger import PipelineLogger, create_logger

WORKSPACE_PREFIX = "inkwell_"


class EphemeralWorkspace:
    """Uniquely named temp directory owned by a single pipeline run.

    Removal happens at most once no matter how many paths reach it:

        with EphemeralWorkspace.create() as workspace:
            render_into(workspace.path)
        # directory is gone here, on success or error

    A failed removal is logged and kept on `cleanup_error`, never raised,
    so the error unwinding through the `with` block stays the one reported.
    """

    def __init__(self, path: Path, logger: Optional[PipelineLogger] = None):
        self.path = Path(path)
        self.logger = logger or create_logger("workspace", "workspace")
        self._removed = False
        self.cleanup_error: Optional[WorkspaceCleanupFailure] = None
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        parent: Optional[Path] = None,
        logger: Optional[PipelineLogger] = None,
    ) -> "EphemeralWorkspace":
        parent = Path(parent) if parent is not None else Path(tempfile.gettempdir())
        path = parent / f"{WORKSPACE_PREFIX}{uuid.uuid4().hex}"
        path.mkdir(parents=True, exist_ok=False)
        return cls(path, logger=logger)

    @property
    def removed(self) -> bool:
        return self._removed

    def exists(self) -> bool:
        return self.path.exists()

    def remove(self) -> bool:
        """Delete the directory tree. Returns False if it was already removed."""
        with self._lock:
            if self._removed:
                return False
            self._removed = True

        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.cleanup_error = WorkspaceCleanupFailure(
                f"Failed to remove workspace {self.path}: {e}"
            )
            self.logger.warning(str(self.cleanup_error), error=repr(e))
        return True

    def __enter__(self) -> "EphemeralWorkspace":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.remove()
        return False

    def __repr__(self):
        return f"EphemeralWorkspace({str(self.path)!r}, removed={self._removed})"
