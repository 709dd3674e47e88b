"""
Configuration settings for the Yahoo Finance connector.

This module defines the endpoints, crumb handling settings and HTTP session
settings used throughout the package. Values can be overridden through
environment variables (or a .env file) at import time.
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv

from .errors import ConfigError


# Endpoints consumed by the crumb/consent flow and the data connector
ENDPOINTS = {
    # Session seeding; only the cookies set by this response matter
    "COOKIE_WARMUP": "https://fc.yahoo.com",
    "CRUMB": "https://query1.finance.yahoo.com/v1/test/getcrumb",
    "CONSENT_BOOTSTRAP": "https://guce.yahoo.com/consent",
    "CONSENT_SUBMIT": "https://consent.yahoo.com/v2/collectConsent",
    "CONSENT_COPY": "https://guce.yahoo.com/copyConsent",
    # Data endpoints
    "CHART": "https://query1.finance.yahoo.com/v8/finance/chart",
    "SEARCH": "https://query2.finance.yahoo.com/v1/finance/search",
    "QUOTE_SUMMARY": "https://query2.finance.yahoo.com/v10/finance/quoteSummary",
    "FUNDAMENTALS": "https://query2.finance.yahoo.com/ws/fundamentals-timeseries/v1/finance/timeseries",
    "OPTIONS": "https://query2.finance.yahoo.com/v7/finance/options",
}

# Crumb cache and acquisition settings
CRUMB_CONFIG = {
    # Crumb validity is not reported by the server, use a fixed conservative TTL
    "TTL_SECONDS": 24 * 60 * 60,
    # 1 disables retries; acquisition failures surface immediately
    "MAX_ATTEMPTS": 1,
    # Fixed delay between attempts when retries are enabled
    "RETRY_DELAY": 1.0,
    # Number of characters of a consent page kept in extraction errors
    "EXCERPT_LENGTH": 1000,
}

# Fixed fields of the consent form; sessionId and csrfToken are scraped
CONSENT_FORM = {
    "agree": "agree",
    "consentUUID": "default",
    "originalDoneUrl": "https://finance.yahoo.com",
    "namespace": "yahoo",
}

# HTTP session settings
SESSION_CONFIG = {
    # Total request timeout in seconds
    "API_TIMEOUT": 30,
    "CONNECT_TIMEOUT": 10,
    "USER_AGENT": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "HEADERS": {
        "Accept": "text/html,application/json,application/xhtml+xml,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
    },
}

# Start of the fundamentals time range; yahoo only returns a few years back
FUNDAMENTALS_START = 1262304000  # 2010-01-01T00:00:00Z


def _read_number(name: str, cast: Any) -> Any:
    raw = os.environ[name]
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}", {"value": raw}) from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive", {"value": raw})
    return value


# Load environment variables if needed
def load_env_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Returns:
        Dictionary containing configuration values from environment variables

    Raises:
        ConfigError: If a numeric variable cannot be parsed
    """
    config = {}

    # Crumb settings
    if "YAHOOCONNECT_CRUMB_TTL" in os.environ:
        config["CRUMB_CONFIG.TTL_SECONDS"] = _read_number("YAHOOCONNECT_CRUMB_TTL", int)

    if "YAHOOCONNECT_CRUMB_MAX_ATTEMPTS" in os.environ:
        config["CRUMB_CONFIG.MAX_ATTEMPTS"] = _read_number("YAHOOCONNECT_CRUMB_MAX_ATTEMPTS", int)

    # Session settings
    if "YAHOOCONNECT_API_TIMEOUT" in os.environ:
        config["SESSION_CONFIG.API_TIMEOUT"] = _read_number("YAHOOCONNECT_API_TIMEOUT", float)

    if os.environ.get("YAHOOCONNECT_USER_AGENT"):
        config["SESSION_CONFIG.USER_AGENT"] = os.environ["YAHOOCONNECT_USER_AGENT"]

    return config


def apply_env_config(env_config: Dict[str, Any]) -> None:
    """
    Apply environment variable configuration.

    Args:
        env_config: Dictionary containing configuration values from environment variables
    """
    for key, value in env_config.items():
        parts = key.split(".")
        if len(parts) == 2:
            module_name, setting_name = parts
            if module_name in globals() and setting_name in globals()[module_name]:
                globals()[module_name][setting_name] = value


# Apply environment configuration, including values from a local .env file
load_dotenv()
ENV_CONFIG = load_env_config()
apply_env_config(ENV_CONFIG)
