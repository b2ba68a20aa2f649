"""Logging configuration."""

import logging
import sys

from eduhub.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging to stdout.

    Args:
        level: Logging level name, e.g. "INFO" or "DEBUG".
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
