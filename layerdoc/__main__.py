"""Entry point for running layerdoc as a module."""

import sys

from layerdoc.cli_entry import main

if __name__ == "__main__":
    sys.exit(main())
