"""Logging configuration using loguru."""

import sys

from loguru import logger

from paam_studio.config import get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Replace loguru's default handler with a stderr sink and an optional file sink.

    Log output goes to stderr so that command output on stdout stays clean.
    """
    settings = get_settings()
    level = level or settings.log_level
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=True)

    if log_file:
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
        )

    logger.debug(f"Logging configured - Level: {level}")
