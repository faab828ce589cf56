"""Logging setup shared by the API server, migrations and tests"""

import logging
import sys
from typing import Optional

from fellowship.config import config

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


class BelowWarningFilter(logging.Filter):
    """Pass DEBUG and INFO records only; WARNING and above go to stderr"""

    def filter(self, record):
        return record.levelno < logging.WARNING


def _stream_handler(stream, level: int, only_below_warning: bool = False):
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    if only_below_warning:
        handler.addFilter(BelowWarningFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(log_level: Optional[str] = None):
    """
    Route INFO/DEBUG records to stdout and WARNING/ERROR records to stderr.

    Args:
        log_level: Level name to use instead of config["log_level"]
    """
    level_name = (log_level or config.get("log_level") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(
        _stream_handler(sys.stdout, logging.DEBUG, only_below_warning=True)
    )
    root_logger.addHandler(_stream_handler(sys.stderr, logging.WARNING))

    if level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.

    Args:
        name: Usually __name__ from the calling module
    """
    return logging.getLogger(name)
