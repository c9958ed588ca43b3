from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import List, Optional, Sequence, Union

from rich.console import Console

from infra.errors import OutputCollision
from infra.logger import PipelineLogger, create_logger
from cli.file_collector import SourceFile
from cli.file_processor import FileProcessor, FileResult, FileStatus
from cli.progress_renderer import ProgressRenderer

console = Console(stderr=True)
print_lock = Lock()


def safe_print(msg, out: Optional[Console] = None):
    """Thread-safe printing. Pass the live display's console so lines print above it."""
    with print_lock:
        (out or console).print(msg)


@dataclass
class BatchSummary:
    results: List[FileResult] = field(default_factory=list)

    def _count(self, status: FileStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def converted(self) -> int:
        return self._count(FileStatus.CONVERTED)

    @property
    def skipped(self) -> int:
        return self._count(FileStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(FileStatus.FAILED)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def process_file(
    processor: FileProcessor,
    source: SourceFile,
    renderer: Optional[ProgressRenderer] = None,
    logger: Optional[PipelineLogger] = None,
) -> FileResult:
    """Convert one file, turning any error into a FAILED result."""
    path = source.path
    sink = renderer.sink_for(path) if renderer else None
    try:
        return processor.process(path, progress_sink=sink, relative=source.relative)
    except KeyboardInterrupt:
        raise
    except Exception as e:
        if logger:
            logger.error(f"Failed to convert {path.name}: {e}", document=str(path), error=repr(e))
        return FileResult(path=path, status=FileStatus.FAILED, error=str(e))
    finally:
        if renderer:
            renderer.finish_file(path)


def run_batch(
    processor: FileProcessor,
    files: Sequence[Union[SourceFile, Path]],
    file_concurrency: int,
    renderer: Optional[ProgressRenderer] = None,
    logger: Optional[PipelineLogger] = None,
) -> BatchSummary:
    """Convert files with up to `file_concurrency` in flight. A failing file never stops the batch.

    Plain paths are placed by file name alone. Raises OutputCollision before
    any work starts when two files would write the same output.
    """
    logger = logger or create_logger("cli", "batch")
    summary = BatchSummary()
    if not files:
        return summary

    sources = [f if isinstance(f, SourceFile) else SourceFile.standalone(f) for f in files]
    collisions = processor.find_collisions(sources)
    if collisions:
        raise OutputCollision(collisions)

    out = renderer.console if renderer else console
    max_workers = max(1, min(file_concurrency, len(sources)))
    logger.info(f"Converting {len(sources)} files", workers=max_workers)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="inkwell-file") as executor:
        futures = {
            executor.submit(process_file, processor, source, renderer, logger): source
            for source in sources
        }

        for future in as_completed(futures):
            result = future.result()
            label = futures[future].relative
            summary.results.append(result)

            if result.status == FileStatus.CONVERTED:
                safe_print(f"✅ [green]{label}[/green]: {result.pages} pages", out)
            elif result.status == FileStatus.SKIPPED:
                safe_print(f"⏭️  [dim]{label}[/dim]", out)
            else:
                safe_print(f"❌ [red]{label}[/red]: {result.error}", out)

    summary.results.sort(key=lambda r: str(r.path))
    return summary
