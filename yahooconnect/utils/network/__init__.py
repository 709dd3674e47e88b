"""
Network utilities for Yahoo Finance requests.

This module provides the shared HTTP session and the request helpers that
classify transport failures.
"""

from .http import FetchedResponse, build_url, fetch_text
from .session_manager import SessionManager


__all__ = [
    "SessionManager",
    "FetchedResponse",
    "fetch_text",
    "build_url",
]
