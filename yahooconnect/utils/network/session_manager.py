"""
HTTP session manager for Yahoo Finance requests.

The crumb is only valid together with the cookies that were set while it was
obtained, so every request of a connector must go through one aiohttp session
and its cookie jar. This module creates that session lazily inside the running
event loop and owns its lifecycle.
"""

import asyncio
from typing import Dict, Optional

import aiohttp
from aiohttp.abc import AbstractCookieJar

from ...core.config import SESSION_CONFIG
from ...core.errors import NetworkError
from ...core.logging import get_logger


logger = get_logger(__name__)


class SessionManager:
    """
    Owner of the aiohttp session shared by the crumb cache and the connector.

    Attributes:
        user_agent: User-Agent header sent with every request
        timeout: Total request timeout in seconds
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        cookie_jar: Optional[AbstractCookieJar] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the session manager.

        Args:
            user_agent: User-Agent header (default: SESSION_CONFIG["USER_AGENT"])
            timeout: Total request timeout in seconds (default: SESSION_CONFIG["API_TIMEOUT"])
            cookie_jar: Cookie store to use; a fresh aiohttp.CookieJar when omitted
            headers: Extra headers merged over SESSION_CONFIG["HEADERS"]
        """
        self.user_agent = user_agent or SESSION_CONFIG["USER_AGENT"]
        self.timeout = timeout or SESSION_CONFIG["API_TIMEOUT"]
        self._cookie_jar = cookie_jar
        self._extra_headers = dict(headers or {})
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    async def get_session(self) -> aiohttp.ClientSession:
        """
        Get or create the HTTP session.

        Returns:
            aiohttp.ClientSession: Session bound to this manager's cookie jar

        Raises:
            NetworkError: If session creation fails
        """
        async with self._session_lock:
            if self._needs_new_session():
                self._create_new_session()
            return self._session

    def _needs_new_session(self) -> bool:
        if self._session is None:
            return True

        if self._session.closed:
            logger.warning("Session was closed, creating new session")
            return True

        return False

    def _create_new_session(self) -> None:
        """Create a new HTTP session with a persistent cookie jar."""
        try:
            timeout = aiohttp.ClientTimeout(
                total=self.timeout,
                connect=SESSION_CONFIG["CONNECT_TIMEOUT"],
            )

            headers = {"User-Agent": self.user_agent}
            headers.update(SESSION_CONFIG["HEADERS"])
            headers.update(self._extra_headers)

            # The jar must outlive recreated sessions, cookies belong to the crumb
            if self._cookie_jar is None:
                self._cookie_jar = aiohttp.CookieJar()

            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
                cookie_jar=self._cookie_jar,
                raise_for_status=False,  # Handle status codes manually
            )

            logger.debug(f"Created new HTTP session (timeout={self.timeout}s)")

        except Exception as e:
            logger.error(f"Failed to create HTTP session: {str(e)}")
            raise NetworkError(f"Session creation failed: {str(e)}") from e

    async def close(self) -> None:
        """Close the session and release its connections."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                logger.debug("Closed HTTP session")

            self._session = None
