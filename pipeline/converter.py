#!/usr/bin/env python3
"""
Document -> per-page text conversion.

ConversionPipeline composes the two stages:

1. PageRasterizer.split renders every page into an EphemeralWorkspace.
2. A bounded pool of extraction workers drains a WorkQueue of PageUnits,
   calling ExtractionClient.extract and storing each page's text at its own
   index through ProgressTracker.advance (result write, counter, event).

The workspace is removed before convert() returns or raises. A worker that
fails stops pulling pages; the others keep draining the queue. Once all
have settled, the first failure is raised.
"""

import time
from pathlib import Path
from typing import List, Optional

from infra.config import InkwellConfig
from infra.logger import PipelineLogger, create_logger
from infra.ocr import ExtractionClient, create_backend
from infra.pdf_utils import Pdf2ImageRasterizationBackend, PdfInfoMetadataProvider
from infra.progress import ProgressSink, ProgressTracker, Stage
from infra.retry import RetryPolicy
from infra.work_queue import WorkQueue
from infra.worker_pool import bounded_worker_count, run_workers
from .rasterizer import DEFAULT_DPI, PageRasterizer
from .results import OrderedResults, PageUnit

DEFAULT_CONCURRENCY = 12


class ConversionPipeline:
    def __init__(
        self,
        rasterizer: PageRasterizer,
        client: ExtractionClient,
        logger: Optional[PipelineLogger] = None,
    ):
        self.rasterizer = rasterizer
        self.client = client
        self.logger = logger or create_logger("pipeline", "convert")

    def convert(
        self,
        document_path: Path,
        dpi: int = DEFAULT_DPI,
        concurrency: int = DEFAULT_CONCURRENCY,
        progress_sink: Optional[ProgressSink] = None,
    ) -> List[str]:
        document_path = Path(document_path)
        start_time = time.time()

        split = self.rasterizer.split(document_path, dpi=dpi, progress_sink=progress_sink)

        with split.workspace:
            texts = self._extract_all(document_path, split.image_paths, concurrency, progress_sink)

        self.logger.info(
            f"Converted {document_path.name}: {len(texts)} pages",
            document=str(document_path),
            pages=len(texts),
            duration_seconds=round(time.time() - start_time, 3),
        )
        return texts

    def _extract_all(
        self,
        document_path: Path,
        image_paths: List[Path],
        concurrency: int,
        progress_sink: Optional[ProgressSink],
    ) -> List[str]:
        total = len(image_paths)
        if total == 0:
            return []

        results = OrderedResults(total)
        queue: WorkQueue[PageUnit] = WorkQueue(
            PageUnit(index, path) for index, path in enumerate(image_paths)
        )
        tracker = ProgressTracker(document_path, Stage.EXTRACTING, total, progress_sink, self.logger)
        workers = bounded_worker_count(concurrency, total)

        self.logger.info(
            f"Extracting {total} pages of {document_path.name}",
            document=str(document_path),
            pages=total,
            workers=workers,
        )

        def worker():
            while (unit := queue.pop()) is not None:
                try:
                    text = self.client.extract(unit.image_path)
                except Exception as e:
                    self.logger.error(
                        f"Extraction failed for page {unit.index + 1} of {document_path.name}: {e}",
                        document=str(document_path),
                        page=unit.index + 1,
                        error=repr(e),
                    )
                    raise
                tracker.advance(lambda: results.store(unit.index, text))

        run_workers(workers, worker, logger=self.logger, description="Extracting pages")
        return results.as_list()


def build_pipeline(
    config: InkwellConfig,
    token_file: Optional[Path] = None,
    logger: Optional[PipelineLogger] = None,
) -> ConversionPipeline:
    """Wire the pdf2image rasterizer and the configured extraction backend."""
    logger = logger or create_logger("pipeline", "convert", log_dir=config.log_dir)
    split_logger = logger.child("split")
    return ConversionPipeline(
        rasterizer=PageRasterizer(
            metadata_provider=PdfInfoMetadataProvider(),
            backend=Pdf2ImageRasterizationBackend(logger=split_logger),
            reserve=config.render_reserve,
            strict_render=config.strict_render,
            logger=split_logger,
        ),
        client=build_client(config, token_file=token_file, logger=logger.child("extract")),
        logger=logger,
    )


def build_client(
    config: InkwellConfig,
    token_file: Optional[Path] = None,
    logger: Optional[PipelineLogger] = None,
) -> ExtractionClient:
    logger = logger or create_logger("pipeline", "extract", log_dir=config.log_dir)
    backend = create_backend(config.processor, config, token_file=token_file, logger=logger)
    retry_policy = RetryPolicy(
        logger=logger,
        backoff_cap_seconds=config.retry.backoff_cap_seconds,
        jitter_seconds=config.retry.jitter_seconds,
    )
    return ExtractionClient(backend, retry_policy=retry_policy, logger=logger)
