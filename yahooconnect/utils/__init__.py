"""Utilities for HTML scraping, networking and async helpers."""
