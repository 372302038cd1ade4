"""
Active — Entry Point.

Single entry point: `python main.py seed|erase|count` manages the local
development database.
"""

import logging
import sys

from active.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from active.cli import main

if __name__ == "__main__":
    sys.exit(main())
