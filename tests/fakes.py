"""
In-process stand-ins for poppler and the remote OCR service.

FakeRasterizationBackend writes "content of page N" into each page file and
FakeExtractionBackend echoes a file's content back as its OCR text, so a
test can tell from the output alone which page landed in which slot.
"""

import random
import threading
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from infra.errors import MetadataUnavailable, PermanentBackendError, TransientBackendError
from infra.ocr import ExtractionBackend
from infra.pdf_utils import MetadataProvider, RasterizationBackend, page_image_path
from infra.progress import ProgressEvent


def page_content(page_number: int) -> str:
    return f"content of page {page_number}"


class FakeMetadataProvider(MetadataProvider):
    def __init__(self, pages: Optional[int]):
        self.pages = pages
        self.calls = 0

    def page_count(self, document_path: Path) -> int:
        self.calls += 1
        if self.pages is None:
            raise MetadataUnavailable(f"No page count for {document_path}")
        return self.pages


class FakeRasterizationBackend(RasterizationBackend):
    def __init__(self, fail_pages: Iterable[int] = (), max_delay: float = 0.0, raise_on_page: Optional[int] = None):
        self.fail_pages = set(fail_pages)
        self.max_delay = max_delay
        self.raise_on_page = raise_on_page
        self.rendered: List[int] = []
        self._lock = threading.Lock()

    def render_page(self, document_path, page_index, dpi, output_prefix) -> bool:
        page_number = page_index + 1
        if self.max_delay:
            time.sleep(random.uniform(0, self.max_delay))
        if page_number == self.raise_on_page:
            raise RuntimeError(f"renderer crashed on page {page_number}")
        if page_number in self.fail_pages:
            return False

        page_image_path(output_prefix, page_index).write_text(page_content(page_number), encoding="utf-8")
        with self._lock:
            self.rendered.append(page_number)
        return True


class FakeExtractionBackend(ExtractionBackend):
    """Echo backend with scripted failures and bookkeeping.

    `failures` maps an operation name ("upload", "read_back", "delete") to a
    list of exceptions raised by successive calls before calls succeed.
    `fail_files` maps a file name to an exception raised on every upload.
    """

    def __init__(
        self,
        failures: Optional[Dict[str, List[Exception]]] = None,
        fail_files: Optional[Dict[str, Exception]] = None,
        max_delay: float = 0.0,
        raw_prefix: str = "",
    ):
        self.failures = {op: list(errors) for op, errors in (failures or {}).items()}
        self.fail_files = fail_files or {}
        self.max_delay = max_delay
        self.raw_prefix = raw_prefix

        self.calls: Dict[str, int] = {"upload": 0, "read_back": 0, "delete": 0}
        self.live: Dict[str, str] = {}
        self.deleted: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._counter = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "fake"

    def _next_failure(self, operation: str) -> Optional[Exception]:
        with self._lock:
            self.calls[operation] += 1
            pending = self.failures.get(operation)
            if pending:
                return pending.pop(0)
        return None

    def upload(self, path: Path) -> str:
        error = self._next_failure("upload")
        if error:
            raise error
        if Path(path).name in self.fail_files:
            raise self.fail_files[Path(path).name]

        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self._counter += 1
            remote_id = f"remote-{self._counter}"
            self.live[remote_id] = Path(path).read_text(encoding="utf-8")

        if self.max_delay:
            time.sleep(random.uniform(0, self.max_delay))
        return remote_id

    def read_back(self, remote_id: str) -> str:
        error = self._next_failure("read_back")
        if error:
            raise error
        with self._lock:
            return self.raw_prefix + self.live[remote_id]

    def delete(self, remote_id: str) -> None:
        error = self._next_failure("delete")
        if error:
            raise error
        with self._lock:
            if remote_id in self.live:
                del self.live[remote_id]
                self.in_flight -= 1
            self.deleted.append(remote_id)


class RecordingSink:
    def __init__(self, fail: bool = False):
        self.events: List[ProgressEvent] = []
        self.fail = fail
        self._lock = threading.Lock()

    def __call__(self, event: ProgressEvent):
        with self._lock:
            self.events.append(event)
        if self.fail:
            raise RuntimeError("sink exploded")


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float):
        self.delays.append(seconds)


def transient(status: int = 503) -> TransientBackendError:
    return TransientBackendError(f"HTTP {status}", status_code=status)


def permanent(status: int = 404) -> PermanentBackendError:
    return PermanentBackendError(f"HTTP {status}", status_code=status)
