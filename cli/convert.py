"""
inkwell convert command - Convert PDFs and images to text.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from infra.config import SUPPORTED_PROCESSORS, apply_overrides, get_config
from infra.logger import create_logger
from infra.ocr import credentials_from_config
from pipeline.converter import build_pipeline
from cli.batch import run_batch
from cli.file_collector import collect_sources
from cli.file_processor import FileProcessor
from cli.progress_renderer import ProgressRenderer


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def comma_list(value: str) -> list:
    return [item.strip() for item in value.split(',') if item.strip()]


def cmd_convert(args):
    config = apply_overrides(get_config(), {
        "dpi": args.dpi,
        "processor": args.processor,
        "ocr_concurrency": args.ocr_concurrency,
        "file_concurrency": args.file_concurrency,
        "formats": args.formats,
        "extensions": args.extensions,
        "page_separator": args.page_separator,
        "log_dir": args.log_dir,
    })

    sources = collect_sources(args.paths, config.extensions)
    if not sources:
        print(f"⚠️  No files with extensions {', '.join(config.extensions)} found")
        return

    # Fail before any work starts when no token is available.
    credentials_from_config(config.drive, token_file=args.token_file).credentials()

    run_id = datetime.now().strftime("%Y%m%d-%H%M%S")
    logger = create_logger(run_id, "convert", log_dir=config.log_dir)

    processor = FileProcessor(
        build_pipeline(config, token_file=args.token_file, logger=logger),
        output_dir=args.output_dir,
        formats=config.formats,
        page_separator=config.page_separator,
        dpi=config.dpi,
        ocr_concurrency=config.ocr_concurrency,
        logger=logger.child("files"),
    )

    print(f"\n📚 {len(sources)} files ({config.file_concurrency} at a time, {config.ocr_concurrency} OCR workers each)\n")

    with ProgressRenderer(total_files=len(sources)) as renderer:
        summary = run_batch(
            processor,
            sources,
            config.file_concurrency,
            renderer=renderer,
            logger=logger.child("batch"),
        )

    print(f"\n🏁 {summary.converted} converted, {summary.skipped} skipped, {summary.failed} failed\n")
    logger.close()

    if not summary.ok:
        sys.exit(1)


def setup_parser(subparsers):
    parser = subparsers.add_parser(
        'convert',
        help='Convert PDFs and images to text'
    )
    parser.add_argument('paths', nargs='+', type=Path, help='Files or directories to convert', metavar='PATH')
    parser.add_argument('-o', '--output-dir', type=Path, default=None, help='Output directory (default: current directory)')
    parser.add_argument('-f', '--formats', type=comma_list, default=None, help='Output formats, comma separated (txt,json,docx)')
    parser.add_argument('-p', '--processor', choices=SUPPORTED_PROCESSORS, default=None, help='OCR backend (default: google_drive)')
    parser.add_argument('--dpi', type=positive_int, default=None, help='Rasterization resolution (default: 150)')
    parser.add_argument('--ocr-concurrency', type=positive_int, default=None, help='Concurrent OCR requests per document (default: 12)')
    parser.add_argument('--file-concurrency', type=positive_int, default=None, help='Documents converted in parallel')
    parser.add_argument('-e', '--extensions', type=comma_list, default=None, help='File extensions to pick up (default: pdf,jpg,jpeg,png)')
    parser.add_argument('--page-separator', default=None, help='Text placed between pages in txt output')
    parser.add_argument('--token-file', type=Path, default=None, help='Token file written by an external OAuth flow (authorized-user JSON)')
    parser.add_argument('--log-dir', type=Path, default=None, help='Write JSONL logs to this directory')
    parser.set_defaults(func=cmd_convert)
