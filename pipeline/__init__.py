"""
Document conversion stages.

1. rasterizer - render every PDF page to PNG in an ephemeral workspace
2. converter  - extract text from the pages with a bounded worker pool
3. writers    - persist the ordered page texts as txt / json / docx
"""

from .rasterizer import PageRasterizer, SplitResult, render_worker_count, DEFAULT_DPI
from .results import OrderedResults, PageUnit
from .converter import ConversionPipeline, build_pipeline, build_client, DEFAULT_CONCURRENCY
from .writers import TxtWriter, JsonWriter, DocxWriter, get_writer, write_outputs, output_paths

__all__ = [
    "PageRasterizer",
    "SplitResult",
    "render_worker_count",
    "DEFAULT_DPI",
    "OrderedResults",
    "PageUnit",
    "ConversionPipeline",
    "build_pipeline",
    "build_client",
    "DEFAULT_CONCURRENCY",
    "TxtWriter",
    "JsonWriter",
    "DocxWriter",
    "get_writer",
    "write_outputs",
    "output_paths",
]
