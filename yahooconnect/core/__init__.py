"""
Core functionality for the Yahoo Finance connector.

This module contains the foundational components of the package:
- Config: Endpoints, crumb and session settings
- Errors: Error hierarchy and classification of transport failures
- Logging: Logging configuration and utilities
"""

from .errors import (
    APIError,
    BuildError,
    ConfigError,
    ConnectionFailedError,
    DataError,
    ExtractionError,
    MaxRetriesReachedError,
    NetworkError,
    TooManyRequestsError,
    UnexpectedResponseError,
    YahooError,
    classify_client_error,
    classify_status,
    format_error_details,
)
from .logging import configure_logging, get_logger, set_log_level


__all__ = [
    "YahooError",
    "APIError",
    "NetworkError",
    "ConnectionFailedError",
    "TooManyRequestsError",
    "UnexpectedResponseError",
    "DataError",
    "ExtractionError",
    "BuildError",
    "ConfigError",
    "MaxRetriesReachedError",
    "classify_client_error",
    "classify_status",
    "format_error_details",
    "configure_logging",
    "get_logger",
    "set_log_level",
]
