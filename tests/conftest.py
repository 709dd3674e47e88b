"""
Global pytest fixtures for yahooconnect tests.

Fixtures defined in the fixture modules are registered here so that every
test module can use them without importing them directly.
"""

import pytest

from yahooconnect.core.config import CRUMB_CONFIG


pytest_plugins = [
    "tests.fixtures.http_fixtures",
]


@pytest.fixture(autouse=True)
def default_crumb_config():
    """Restore crumb settings changed by a test."""
    saved = dict(CRUMB_CONFIG)
    yield CRUMB_CONFIG
    CRUMB_CONFIG.clear()
    CRUMB_CONFIG.update(saved)
