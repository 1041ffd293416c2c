"""
Logging setup.

Configures the loguru logger for processes embedding the referral core.
"""

import sys

from loguru import logger

from referral_core.config.settings import settings


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Configure stderr and optional rotating file sinks."""
    level = level or settings.log_level
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )

    logger.info(
        "Referral core logging configured",
        extra={"level": level, "log_file": log_file},
    )
