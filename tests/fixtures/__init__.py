"""
Test fixtures for yahooconnect tests.

This package provides a scripted stand-in for aiohttp sessions and sample
consent pages used across the test suite.
"""

from .http_fixtures import FakeResponse, FakeSession, FakeSessionManager
