"""Logging setup and small shared helpers."""

import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(
    env: str,
    home_dir: Path,
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    console: bool = True,
) -> None:  # pragma: no cover
    """Configure loguru sinks.

    Args:
        env: The environment name (dev, test, prod)
        home_dir: The root directory for the log file
        log_file: Optional log file name, relative to home_dir
        log_level: The logging level to use
        console: Whether to log to stderr
    """
    logger.remove()

    if log_file:
        log_path = home_dir / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=env != "prod",
            enqueue=True,
            colorize=False,
        )

    if console:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True, colorize=True)

    logger.info(f"ENV: '{env}' Log level: '{log_level}' Logging to {log_file or 'stderr'}")

    # Reduce noise from third-party libraries
    noisy_loggers = {
        "sqlalchemy.engine": logging.WARNING,
        "aiosqlite": logging.WARNING,
    }
    for logger_name, level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def escape_like(value: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )
