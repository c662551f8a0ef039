"""
flamerank.__main__ - Entry point for running flamerank as a module.

Usage:
    python -m flamerank <input_file> [options]

This module enables running flamerank using:
    python -m flamerank profile.speedscope.json
"""

import sys

from flamerank.cli import main

if __name__ == "__main__":
    sys.exit(main())
