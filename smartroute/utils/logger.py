import logging
import sys
from typing import Optional

from smartroute.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a stdout logger for a SmartRoute module.

    Handlers are attached once per logger name, so calling this at import
    time in every module is safe. The level comes from ``LOG_LEVEL``.

    Args:
        name: Logger name (typically __name__ from calling module)
    """
    logger = logging.getLogger(name or "smartroute")

    if not logger.handlers:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

        logger.addHandler(handler)
        logger.setLevel(level)

    return logger
