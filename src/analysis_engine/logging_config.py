"""
Logging setup for hosts that embed the engine.

Library modules only call ``logging.getLogger(__name__)``; this helper is for
scripts and applications that want readable console output.
"""

import logging
from typing import Optional

from .config import settings

PACKAGE_LOGGER = "src.analysis_engine"


def setup_logging(level: Optional[str] = None, logger_name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        logger_name: Logger to configure

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    level = (level or settings.log_level).upper()
    logger.setLevel(level)

    # Don't add handlers twice
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    return logger
