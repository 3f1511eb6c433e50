"""
Logging setup using Loguru.
"""

from __future__ import annotations

import sys

from loguru import logger

from telemetry.config import log_file, log_level

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_configured = False


def setup_logging(*, force: bool = False) -> None:
    """
    Configure the Loguru sinks once per process (stderr, plus a rotating file if
    `VGRID_LOG_FILE` is set).
    """
    global _configured
    if _configured and not force:
        return

    logger.remove()
    level = log_level()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=True)

    path = log_file()
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            format=LOG_FORMAT,
            level=level,
            rotation="50 MB",
            retention="7 days",
        )

    _configured = True
    logger.info(f"Logging initialized: level={level}, file={path}")
