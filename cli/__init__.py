import argparse
import sys

import cli.config
import cli.convert
from infra.errors import InkwellError


def create_parser():
    parser = argparse.ArgumentParser(
        prog='inkwell',
        description='Inkwell - Turn scanned PDFs and images into text',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Conversion
  inkwell convert scan.pdf
  inkwell convert ~/Scans -o ~/Text -f txt,json
  inkwell convert book.pdf --dpi 300 --ocr-concurrency 8
  inkwell convert photos/ -e jpg,png --token-file ~/.config/inkwell/token.json

  # Configuration
  inkwell config show
  inkwell config set dpi 200
  inkwell config set retry.backoff_cap_seconds 30
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')
    subparsers.required = True

    cli.convert.setup_parser(subparsers)
    cli.config.setup_parser(subparsers)

    return parser


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except InkwellError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted", file=sys.stderr)
        sys.exit(1)
