"""Logging configuration for lyricsync."""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

# Loggers of the HTTP stack and provider libraries; chatty at INFO
PROVIDER_LOGGERS = ("syncedlyrics", "lyriq", "urllib3", "requests", "asyncio")

VERBOSE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"


def quiet_provider_loggers(
    level: int = logging.WARNING, names: Sequence[str] = PROVIDER_LOGGERS
) -> None:
    """Raise the threshold of third-party loggers used while fetching lyrics."""
    for name in names:
        logging.getLogger(name).setLevel(level)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
    provider_level: Optional[str] = None,
) -> logging.Logger:
    """Set up the ``lyricsync`` logger.

    Provider libraries log at WARNING and above unless ``provider_level``
    says otherwise; verbose mode lets them through at the package level.
    """
    if provider_level is None:
        provider_level = level if verbose else "WARNING"
    quiet_provider_loggers(getattr(logging, provider_level.upper()))

    logger = logging.getLogger("lyricsync")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    formatter = logging.Formatter(VERBOSE_FORMAT if verbose else SIMPLE_FORMAT)

    # stderr, so that command output stays pipeable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "lyricsync") -> logging.Logger:
    """Get logger instance."""
    return logging.getLogger(name)
