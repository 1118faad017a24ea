import logging
from logging import Logger

from .config import get_settings

LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"


def configure_logging() -> Logger:
    """Return the service logger, attaching its handler on first use."""
    settings = get_settings()

    logger = logging.getLogger(settings.app_name)
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.log_level.upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    return logger
