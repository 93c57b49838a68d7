"""Bot Entry Point - Root Module.

This is the root-level entry point for running the bot.
It imports from the src package.
"""

import sys

from src.main import run


__all__ = [
    "run",
]


if __name__ == "__main__":
    sys.exit(run())
