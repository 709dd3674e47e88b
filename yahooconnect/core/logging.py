"""
Logging configuration for the Yahoo Finance connector.

This module provides the logging setup used by the package:
- Dictionary based configuration with console and file handlers
- Per-module loggers through get_logger
- Log level management and debug helpers
"""

import logging
import logging.config
import os
import sys
from typing import Any, Dict, List, Optional, Union


# Default logging formats
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(message)s"

PACKAGE_LOGGER = "yahooconnect"


def _to_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper())
    return level


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    console_level: Optional[Union[int, str]] = None,
    format_string: Optional[str] = None,
    debug: bool = False,
) -> None:
    """
    Configure logging for the package.

    Args:
        level: Base logging level (default: INFO)
        log_file: Path to log file (default: None, no file output)
        console: Whether to log to console (default: True)
        console_level: Console logging level (default: same as base level)
        format_string: Log format string (default: DEFAULT_FORMAT or DEBUG_FORMAT if debug=True)
        debug: Whether to enable debug mode (more verbose logging)

    Side Effects:
        Configures the Python logging system
    """
    level = _to_level(level)
    console_level = level if console_level is None else _to_level(console_level)

    if format_string is None:
        format_string = DEBUG_FORMAT if debug else DEFAULT_FORMAT

    handlers: List[Dict[str, Any]] = []

    if console:
        handlers.append(
            {
                "level": console_level,
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": sys.stdout,
            }
        )

    if log_file:
        # Ensure directory exists
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        handlers.append(
            {
                "level": level,
                "class": "logging.FileHandler",
                "formatter": "detailed",
                "filename": log_file,
                "encoding": "utf-8",
            }
        )

    if not handlers:
        logging.getLogger(PACKAGE_LOGGER).setLevel(level)
        return

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {"format": format_string},
            "console": {"format": CONSOLE_FORMAT},
        },
        "handlers": {},
        "loggers": {
            PACKAGE_LOGGER: {
                "level": level,
                "handlers": [],
                "propagate": False,
            },
            # Make third-party libraries less verbose
            "aiohttp": {
                "level": logging.WARNING,
                "propagate": True,
            },
        },
    }

    for i, handler in enumerate(handlers):
        handler_name = f"handler_{i}"
        logging_config["handlers"][handler_name] = handler
        logging_config["loggers"][PACKAGE_LOGGER]["handlers"].append(handler_name)

    logging.config.dictConfig(logging_config)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured with level: {logging.getLevelName(level)}")
    if log_file:
        logger.debug(f"Log file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def set_log_level(level: Union[int, str], logger_name: Optional[str] = PACKAGE_LOGGER) -> None:
    """
    Set the log level for a specific logger or the root logger.

    Args:
        level: Logging level (can be string like 'INFO' or int like logging.INFO)
        logger_name: Name of logger to set level for (None for the root logger)
    """
    logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()
    logger.setLevel(_to_level(level))
