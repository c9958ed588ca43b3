#!/usr/bin/env python3
"""
Inkwell CLI - Turn scanned PDFs and images into text

Commands:
    inkwell convert <path...>          Convert files or directories
    inkwell config show                Show configuration
    inkwell config set <key> <value>   Set a configuration value
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from cli import main


if __name__ == '__main__':
    main()
