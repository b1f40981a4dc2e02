"""Module entry-point: ``python -m emailextract <path> [<path> ...]``."""

from __future__ import annotations

import sys

from emailextract.cli import main

if __name__ == "__main__":
    sys.exit(main())
