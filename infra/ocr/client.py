"""
Text extraction for a single image.

ExtractionClient runs the upload -> read back -> delete sequence against an
ExtractionBackend, each step under RetryPolicy. Deletion of the remote
artifact is guaranteed once the upload succeeded:

- read back fails   -> delete is attempted, a delete failure is only logged,
                       and the read-back error is what the caller sees
- read back works   -> delete runs, and a delete failure propagates
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from infra.errors import FileNotFound
from infra.logger import PipelineLogger, create_logger
from infra.retry import RetryPolicy
from .provider import ExtractionBackend

# UTF-8 BOM followed by the separator line Drive prepends to text exports.
EXPORT_ARTIFACT_MARKER = "\ufeff" + "_" * 16


def normalize_text(text: str) -> str:
    """CRLF -> LF, drop export artifact markers, trim. Idempotent.

    Replacement runs to a fixed point because removing one occurrence can
    splice a new one together (e.g. "\\r\\r\\n\\n").
    """
    previous = None
    while text != previous:
        previous = text
        text = text.replace("\r\n", "\n").replace(EXPORT_ARTIFACT_MARKER, "")
    return text.strip()


class ExtractionClient:
    def __init__(
        self,
        backend: ExtractionBackend,
        retry_policy: Optional[RetryPolicy] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        self.backend = backend
        self.logger = logger or create_logger("extraction", "extract")
        self.retry_policy = retry_policy or RetryPolicy(logger=self.logger)

    def extract(self, image_path: Path) -> str:
        image_path = Path(image_path)
        if not image_path.is_file():
            raise FileNotFound(image_path)

        remote_id = self.retry_policy.execute_with_retry(
            lambda: self.backend.upload(image_path),
            operation="upload",
        )

        with self._remote_artifact(remote_id, image_path):
            raw = self.retry_policy.execute_with_retry(
                lambda: self.backend.read_back(remote_id),
                operation="read_back",
            )

        return normalize_text(raw)

    @contextmanager
    def _remote_artifact(self, remote_id: str, image_path: Path) -> Iterator[str]:
        try:
            yield remote_id
        except BaseException:
            try:
                self._delete(remote_id)
            except Exception as cleanup_error:
                self.logger.error(
                    f"Failed to delete remote artifact {remote_id} for {image_path.name}",
                    operation="delete",
                    error=repr(cleanup_error),
                )
            raise
        else:
            self._delete(remote_id)

    def _delete(self, remote_id: str) -> None:
        self.retry_policy.execute_with_retry(
            lambda: self.backend.delete(remote_id),
            operation="delete",
        )
