"""Logging configuration for the settlement service.

Log level comes from settings (LOG_LEVEL, default INFO). The core services
only obtain module loggers; handlers are attached once by the application.
"""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: str) -> int:
    """Resolve a level name, falling back to INFO for unknown names."""
    return LOG_LEVEL_MAP.get(level_name.upper(), logging.INFO)


def setup_logging(level_name: str = "INFO") -> None:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level_name: Level name such as "DEBUG" or "WARNING"

    Calling it again replaces the handler instead of stacking duplicates.
    """
    log_level = get_log_level(level_name)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)
