"""
Yahoo Finance connector

An asyncio client for the Yahoo Finance web API. Data requests must carry a
short-lived crumb tied to the session cookies; the package obtains it, going
through the consent flow when Yahoo asks for it, and shares it between all
concurrent requests.
"""

import logging
import os

from dotenv import load_dotenv

from .core.logging import configure_logging, get_logger, set_log_level


__version__ = "0.1.0"

load_dotenv()

# Set up default logging if not already configured
if not logging.root.handlers:
    configure_logging(
        level=os.environ.get("YAHOOCONNECT_LOG_LEVEL", "INFO"),
        log_file=os.environ.get("YAHOOCONNECT_LOG_FILE") or None,
        console=False,  # Default to no console output for library usage
        debug=os.environ.get("YAHOOCONNECT_DEBUG", "").lower() == "true",
    )

from .api import (
    Consent,
    ConsentNegotiator,
    Credential,
    CrumbAcquirer,
    CrumbCache,
    YahooConnector,
)
from .core.errors import (
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
)
from .utils.html_tokens import extract_token


__all__ = [
    "__version__",
    # Connector and crumb handling
    "YahooConnector",
    "CrumbCache",
    "CrumbAcquirer",
    "Credential",
    "ConsentNegotiator",
    "Consent",
    "extract_token",
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
]
