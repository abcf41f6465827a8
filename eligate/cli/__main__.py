"""
ELI Gate CLI entry point.

Usage:
    python -m eligate.cli validate <payload.json>
    python -m eligate.cli validate <payload.json> --mode warn
    python -m eligate.cli codes
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
