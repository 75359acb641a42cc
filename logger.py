"""Logging configuration for ShameBot."""

import logging
import sys
from typing import Optional

logger = logging.getLogger("shamebot")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Send log records to the console and, optionally, to a file."""
    logger.setLevel(level.upper())

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
