"""
Centralized logging configuration for the gatekeeper service.

Usage:
    from app.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Resolved repository %s", coordinates.full_name)
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO (httpx logs every GitHub page).
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a standard format.

    Called once from the application lifespan.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance, typically for ``__name__``."""
    return logging.getLogger(name)
