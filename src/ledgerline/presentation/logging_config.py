"""Logging configuration for ledgerline entry points."""

import logging
import sys

from ledgerline_config.settings import get_settings


def configure_logging() -> None:
    """
    Configure logging for the application.

    Sets up:
    - Console output with timestamps and module names
    - Configurable log level for ledgerline modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    settings = get_settings()
    log_level_str = settings.log_level.upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("ledgerline").setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
