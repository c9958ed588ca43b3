"""
PDF Utilities

Page-count lookup and single-page rendering backed by poppler through
pdf2image. PageRasterizer depends only on the two interfaces below, so tests
and alternative renderers can plug in without poppler installed.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)
from pdf2image.pdf2image import pdfinfo_from_path

from infra.errors import MetadataUnavailable
from infra.logger import PipelineLogger, create_logger

PAGE_FILE_PREFIX = "page"
PAGE_FILE_PATTERN = f"{PAGE_FILE_PREFIX}-*.png"
PAGE_NUMBER_WIDTH = 5


def page_image_path(output_prefix: Path, page_index: int) -> Path:
    """Deterministic image path for a 0-based page index.

    Names are 1-based and zero padded to at least PAGE_NUMBER_WIDTH digits.
    Order files with page_number(), since names stop sorting past 99999 pages:
        page_image_path(Path("/tmp/w/page"), 0) -> /tmp/w/page-00001.png
    """
    output_prefix = Path(output_prefix)
    return output_prefix.with_name(
        f"{output_prefix.name}-{page_index + 1:0{PAGE_NUMBER_WIDTH}d}.png"
    )


def page_number(image_path: Path) -> int:
    """1-based page number parsed from a page_image_path() name."""
    return int(Path(image_path).stem.rsplit("-", 1)[-1])


class MetadataProvider(ABC):
    @abstractmethod
    def page_count(self, document_path: Path) -> int:
        """Return the number of pages or raise MetadataUnavailable."""
        pass


class RasterizationBackend(ABC):
    @abstractmethod
    def render_page(self, document_path: Path, page_index: int, dpi: int, output_prefix: Path) -> bool:
        """Render one 0-based page to page_image_path(output_prefix, page_index).

        Returns False on failure instead of raising.
        """
        pass


class PdfInfoMetadataProvider(MetadataProvider):
    def __init__(self, poppler_path: Optional[str] = None, timeout: Optional[int] = None):
        self.poppler_path = poppler_path
        self.timeout = timeout

    def page_count(self, document_path: Path) -> int:
        try:
            info = pdfinfo_from_path(
                str(document_path),
                poppler_path=self.poppler_path,
                timeout=self.timeout,
            )
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, PDFPopplerTimeoutError) as e:
            raise MetadataUnavailable(f"Failed to read PDF metadata for {document_path}: {e}") from e

        pages = info.get('Pages')
        try:
            count = int(pages)
        except (TypeError, ValueError) as e:
            raise MetadataUnavailable(
                f"Failed to get page count from PDF {document_path}: {info!r}"
            ) from e

        if count < 0:
            raise MetadataUnavailable(f"Negative page count for {document_path}: {count}")
        return count


class Pdf2ImageRasterizationBackend(RasterizationBackend):
    def __init__(
        self,
        poppler_path: Optional[str] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        self.poppler_path = poppler_path
        self.logger = logger or create_logger("pdf_utils", "split")

    def render_page(self, document_path: Path, page_index: int, dpi: int, output_prefix: Path) -> bool:
        page_number = page_index + 1
        output_path = page_image_path(output_prefix, page_index)

        try:
            images = convert_from_path(
                str(document_path),
                dpi=dpi,
                first_page=page_number,
                last_page=page_number,
                poppler_path=self.poppler_path,
            )
        except Exception as e:
            self.logger.warning(
                f"Render failed for page {page_number}: {e}",
                page=page_number,
                error=repr(e),
            )
            return False

        if not images:
            self.logger.warning(f"No image returned for page {page_number}", page=page_number)
            return False

        try:
            images[0].save(output_path, format='PNG')
        except OSError as e:
            self.logger.warning(
                f"Could not save page {page_number} to {output_path}: {e}",
                page=page_number,
                error=repr(e),
            )
            return False
        return True
