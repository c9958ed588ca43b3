"""
Page rasterization.

PageRasterizer turns a PDF into one PNG per page inside a fresh
EphemeralWorkspace. Pages are rendered by a bounded pool of threads pulling
page indices from a shared WorkQueue; the page numbers in the file names
define page order, not the order in which workers finish.

The caller owns the returned workspace and must remove it (normally with
`with result.workspace:`). If split() raises, the workspace is already gone.
"""

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from infra.errors import DocumentNotFound, RasterizationFailure
from infra.logger import PipelineLogger, create_logger
from infra.pdf_utils import (
    PAGE_FILE_PATTERN,
    PAGE_FILE_PREFIX,
    MetadataProvider,
    Pdf2ImageRasterizationBackend,
    PdfInfoMetadataProvider,
    RasterizationBackend,
    page_number,
)
from infra.progress import ProgressSink, ProgressTracker, Stage
from infra.work_queue import WorkQueue
from infra.worker_pool import bounded_worker_count, run_workers
from infra.workspace import EphemeralWorkspace

DEFAULT_DPI = 150
DEFAULT_RENDER_RESERVE = 2
MIN_RENDER_WORKERS = 2


def render_worker_count(total_pages: int, reserve: int = DEFAULT_RENDER_RESERVE) -> int:
    """CPU count minus reserve (at least 2), clamped to [1, total_pages]."""
    cpus = os.cpu_count() or 1
    return bounded_worker_count(max(cpus - reserve, MIN_RENDER_WORKERS), total_pages)


@dataclass
class SplitResult:
    workspace: EphemeralWorkspace
    image_paths: List[Path] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.image_paths)


class PageRasterizer:
    def __init__(
        self,
        metadata_provider: Optional[MetadataProvider] = None,
        backend: Optional[RasterizationBackend] = None,
        reserve: int = DEFAULT_RENDER_RESERVE,
        strict_render: bool = False,
        logger: Optional[PipelineLogger] = None,
        workspace_parent: Optional[Path] = None,
    ):
        self.logger = logger or create_logger("rasterizer", "split")
        self.metadata_provider = metadata_provider or PdfInfoMetadataProvider()
        self.backend = backend or Pdf2ImageRasterizationBackend(logger=self.logger)
        self.reserve = reserve
        self.strict_render = strict_render
        self.workspace_parent = workspace_parent

        self._page_counts: Dict[Tuple[str, int, int], int] = {}
        self._page_counts_lock = threading.Lock()

    def page_count(self, document_path: Path) -> int:
        """Page count for a document, cached until the file changes."""
        document_path = Path(document_path)
        if not document_path.is_file():
            raise DocumentNotFound(document_path)

        stat = document_path.stat()
        key = (str(document_path.resolve()), stat.st_mtime_ns, stat.st_size)

        with self._page_counts_lock:
            if key in self._page_counts:
                return self._page_counts[key]

        count = self.metadata_provider.page_count(document_path)

        with self._page_counts_lock:
            self._page_counts[key] = count
        return count

    def split(
        self,
        document_path: Path,
        dpi: int = DEFAULT_DPI,
        progress_sink: Optional[ProgressSink] = None,
    ) -> SplitResult:
        document_path = Path(document_path)
        total_pages = self.page_count(document_path)

        workspace = EphemeralWorkspace.create(parent=self.workspace_parent, logger=self.logger)
        try:
            image_paths = self._render_all(document_path, total_pages, dpi, workspace.path, progress_sink)
        except BaseException:
            workspace.remove()
            raise

        return SplitResult(workspace=workspace, image_paths=image_paths)

    def _render_all(
        self,
        document_path: Path,
        total_pages: int,
        dpi: int,
        workspace_path: Path,
        progress_sink: Optional[ProgressSink],
    ) -> List[Path]:
        if total_pages == 0:
            self.logger.info(f"{document_path.name} has no pages", document=str(document_path), pages=0)
            return []

        workers = render_worker_count(total_pages, self.reserve)
        self.logger.info(
            f"Rendering {total_pages} pages of {document_path.name} at {dpi} dpi",
            document=str(document_path),
            pages=total_pages,
            workers=workers,
        )

        queue: WorkQueue[int] = WorkQueue(range(total_pages))
        tracker = ProgressTracker(document_path, Stage.SPLITTING, total_pages, progress_sink, self.logger)
        output_prefix = workspace_path / PAGE_FILE_PREFIX

        def worker():
            while (page_index := queue.pop()) is not None:
                if not self.backend.render_page(document_path, page_index, dpi, output_prefix):
                    self.logger.warning(
                        f"Page {page_index + 1} of {document_path.name} was not rendered",
                        document=str(document_path),
                        page=page_index + 1,
                    )
                tracker.advance()

        run_workers(workers, worker, logger=self.logger, description="Rendering pages")

        image_paths = sorted(workspace_path.glob(PAGE_FILE_PATTERN), key=page_number)
        self._check_rendered(document_path, total_pages, image_paths)
        return image_paths

    def _check_rendered(self, document_path: Path, total_pages: int, image_paths: List[Path]):
        if len(image_paths) == total_pages:
            return

        rendered = {page_number(p) for p in image_paths}
        missing = [n for n in range(1, total_pages + 1) if n not in rendered]
        message = (
            f"Rendered {len(image_paths)} of {total_pages} pages for {document_path.name}"
            f" (missing: {missing})"
        )

        if self.strict_render:
            raise RasterizationFailure(message, missing_pages=missing)
        self.logger.warning(message, document=str(document_path), pages=len(image_paths))
