#!/usr/bin/env python3
"""BrainSync — entry point.

Run with:
    python main.py
    python -m brainsync
"""

import sys

from brainsync.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
