"""
CommunityWatch - Logging Configuration
Centralized logging setup for the service and CLI scripts.
"""

import logging
import sys
from typing import Optional
from functools import lru_cache

from communitywatch.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# Chatty client libraries pulled in by httpx and firebase-admin
NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "urllib3",
    "google.auth",
    "google.api_core",
    "grpc",
)


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        format_string: Custom format string for log messages

    Returns:
        The ``communitywatch`` logger
    """
    log_level = getattr(logging, (level or settings.log_level).upper())

    logging.basicConfig(
        level=log_level,
        format=format_string or LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger("communitywatch")
    logger.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


@lru_cache()
def get_logger(name: str = "communitywatch") -> logging.Logger:
    """Get a logger under the application namespace."""
    if name != "communitywatch" and not name.startswith("communitywatch."):
        name = f"communitywatch.{name}"
    return logging.getLogger(name)


# Initialize default logger
logger = setup_logging()
