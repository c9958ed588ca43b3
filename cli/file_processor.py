"""
Single-file conversion for the CLI.

PDFs go through ConversionPipeline (split + extract), images go straight to
the pipeline's ExtractionClient as a one-page document. Outputs land in
output_dir at the input's relative path with its extension replaced,
so scans/a/scan.png and scans/b/scan.png become a/scan.txt and b/scan.txt.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from infra.config import DEFAULT_PAGE_SEPARATOR
from infra.logger import PipelineLogger, create_logger
from infra.progress import ProgressSink, ProgressTracker, Stage
from pipeline.converter import DEFAULT_CONCURRENCY, ConversionPipeline
from pipeline.rasterizer import DEFAULT_DPI
from pipeline.writers import output_paths, write_outputs
from cli.file_collector import SourceFile

PDF_EXTENSION = "pdf"


class FileStatus(str, Enum):
    CONVERTED = "converted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileResult:
    path: Path
    status: FileStatus
    outputs: List[Path] = field(default_factory=list)
    pages: int = 0
    error: Optional[str] = None


def is_pdf(path: Path) -> bool:
    return Path(path).suffix.lower().lstrip('.') == PDF_EXTENSION


class FileProcessor:
    def __init__(
        self,
        pipeline: ConversionPipeline,
        output_dir: Optional[Path] = None,
        formats: Sequence[str] = ("txt",),
        page_separator: str = DEFAULT_PAGE_SEPARATOR,
        dpi: int = DEFAULT_DPI,
        ocr_concurrency: int = DEFAULT_CONCURRENCY,
        logger: Optional[PipelineLogger] = None,
    ):
        self.pipeline = pipeline
        self.output_dir = Path(output_dir) if output_dir is not None else Path.cwd()
        self.formats = list(formats)
        self.page_separator = page_separator
        self.dpi = dpi
        self.ocr_concurrency = ocr_concurrency
        self.logger = logger or create_logger("cli", "files")

    def output_base(self, path: Path, relative: Optional[Path] = None) -> Path:
        """Output path without extension. `relative` defaults to the file name."""
        relative = Path(relative) if relative is not None else Path(Path(path).name)
        return self.output_dir / relative.with_suffix('')

    def targets(self, path: Path, relative: Optional[Path] = None) -> List[Path]:
        return output_paths(self.output_base(path, relative), self.formats)

    def is_done(self, path: Path, relative: Optional[Path] = None) -> bool:
        return all(target.exists() for target in self.targets(path, relative))

    def find_collisions(self, sources: Iterable[SourceFile]) -> Dict[Path, List[Path]]:
        """Output targets claimed by more than one source, mapped to those sources."""
        claims: Dict[Path, List[Path]] = {}
        for source in sources:
            for target in self.targets(source.path, source.relative):
                claims.setdefault(target, []).append(source.path)
        return {target: paths for target, paths in claims.items() if len(paths) > 1}

    def process(
        self,
        path: Path,
        progress_sink: Optional[ProgressSink] = None,
        relative: Optional[Path] = None,
    ) -> FileResult:
        """Convert one file. Errors propagate to the caller."""
        path = Path(path)
        base = self.output_base(path, relative)

        if self.is_done(path, relative):
            self.logger.info(f"Skipping {path.name}: outputs exist", document=str(path))
            return FileResult(path=path, status=FileStatus.SKIPPED, outputs=self.targets(path, relative))

        if is_pdf(path):
            texts = self.pipeline.convert(
                path,
                dpi=self.dpi,
                concurrency=self.ocr_concurrency,
                progress_sink=progress_sink,
            )
        else:
            texts = self._extract_image(path, progress_sink)

        outputs = write_outputs(
            texts,
            base,
            self.formats,
            page_separator=self.page_separator,
        )
        self.logger.info(
            f"Wrote {len(outputs)} output(s) for {path.name}",
            document=str(path),
            pages=len(texts),
        )
        return FileResult(path=path, status=FileStatus.CONVERTED, outputs=outputs, pages=len(texts))

    def _extract_image(self, path: Path, progress_sink: Optional[ProgressSink]) -> List[str]:
        tracker = ProgressTracker(path, Stage.EXTRACTING, 1, progress_sink, self.logger)
        texts: List[str] = []
        text = self.pipeline.client.extract(path)
        tracker.advance(lambda: texts.append(text))
        return texts
