"""loguru sinks for the FitTrack service."""

import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def setup_logger(level: str = "INFO", log_file: str | None = None) -> None:
    """Log to stderr, and also to `log_file` when set (rotated daily, kept a week)."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    if log_file:
        logger.add(log_file, format=LOG_FORMAT, level=level, rotation="1 day", retention="7 days")
