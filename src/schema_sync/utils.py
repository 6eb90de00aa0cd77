"""Utility functions for schema-sync."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:  # pragma: no cover
    """Configure loguru sinks.

    Args:
        log_level: Minimum level for every sink
        log_file: Optional path for a rotating file sink
        console: Whether to log to stderr
    """
    # Remove default handler and any existing handlers
    logger.remove()

    if console:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True, colorize=True)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=True,
            enqueue=True,
            colorize=False,
        )

    logger.debug(f"Logging configured: level={log_level}, file={log_file}")
