"""
Main entry point for running glazeup as a module.

Usage:
    python -m glazeup run [phases...] [-c config.json]
"""

from .cli import main

if __name__ == "__main__":
    import sys

    sys.exit(main())
