"""Utility functions for file-drive."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size: int) -> str:
    """
    Format a byte count for display, base 1024.

    Examples:
        0 -> "0 Bytes"
        1536 -> "1.5 KB"
        1048576 -> "1 MB"
    """
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    # strip trailing zeros: 1.50 -> 1.5, 2.00 -> 2
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[i]}"


def display_mime_type(mime_type: Optional[str]) -> str:
    return mime_type or "unknown"


def setup_logging(log_file: Optional[Path] = None, level: str = "INFO") -> None:
    """
    Configure loguru sinks.

    Args:
        log_file: Optional path of a rotating log file
        level: Minimum level written to stderr
    """
    logger.remove()
    logger.add(sys.stderr, level=level, colorize=True)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )
