# src/config/logging_config.py
# Responsibility: One-time configuration of application logging.

import logging
import sys
from typing import Optional

from src.config.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_initialized = False


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configures the root logger with a single console handler.
    Safe to call more than once; only the first call has effect.

    Args:
        level (str): Log level name. Defaults to settings.LOGGING.LEVEL.
    """
    global _initialized
    if _initialized:
        return

    level_name = (level or settings.LOGGING.LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)

    # Library noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _initialized = True
    logging.getLogger(__name__).info("Logging initialized (level: %s)", level_name)
