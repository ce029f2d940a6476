"""Executable entry point for ``python -m taskpulse``."""

from __future__ import annotations

import sys

from taskpulse.app import main


if __name__ == "__main__":
    sys.exit(main())
