"""
Scripted HTTP fixtures.

FakeSession mimics the part of aiohttp.ClientSession used by the package:
``session.request(method, url, **kwargs)`` returning an async context manager.
Responses are scripted per (method, url); a URL is matched exactly first and
then without its query string. Every call is recorded for assertions.
"""

import asyncio
import os
from typing import Any, Dict, List, Optional, Tuple, Union
from unittest.mock import MagicMock

import aiohttp
import pytest

from yahooconnect.core.config import ENDPOINTS


Scripted = Union["FakeResponse", BaseException]


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(
        self,
        status: int = 200,
        text: str = "",
        headers: Optional[Dict[str, str]] = None,
        url: str = "",
    ):
        self.status = status
        self._text = text
        self.headers = headers or {}
        self.url = url

    async def text(self, errors: str = "strict") -> str:
        return self._text

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=MagicMock(real_url=self.url),
                history=(),
                status=self.status,
                message="error",
                headers=self.headers,
            )

    async def __aenter__(self) -> "FakeResponse":
        # Yield to the loop like a real request would
        await asyncio.sleep(0)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class FakeSession:
    """Replays scripted responses; the last scripted item for a route repeats."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Scripted]] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    def add(self, method: str, url: str, *responses: Scripted) -> "FakeSession":
        self.routes.setdefault((method, url), []).extend(responses)
        return self

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        key = (method, url)
        if key not in self.routes:
            key = (method, url.split("?", 1)[0])
        if key not in self.routes:
            raise AssertionError(f"Unexpected request: {method} {url}")

        queue = self.routes[key]
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        if not item.url:
            item.url = url
        return item

    def calls_to(self, url: str, method: str = "GET") -> List[Tuple[str, str, Dict[str, Any]]]:
        return [c for c in self.calls if c[0] == method and c[1].split("?", 1)[0] == url]

    async def close(self) -> None:
        self.closed = True


class FakeSessionManager:
    """Stand-in for SessionManager handing out one FakeSession."""

    def __init__(self, session: FakeSession):
        self.session = session

    async def get_session(self) -> FakeSession:
        return self.session

    async def close(self) -> None:
        await self.session.close()


def load_consent_page(name: str) -> str:
    path = os.path.join(os.path.dirname(__file__), "pages", name)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def connector_error(host: str = "fc.yahoo.com") -> aiohttp.ClientConnectorError:
    """A DNS failure as raised by aiohttp."""
    key = MagicMock(host=host, port=443, ssl=True)
    return aiohttp.ClientConnectorError(key, OSError(-2, "Name or service not known"))


def response_error(status: int, headers: Optional[Dict[str, str]] = None) -> aiohttp.ClientResponseError:
    return aiohttp.ClientResponseError(
        request_info=MagicMock(real_url="https://example.com"),
        history=(),
        status=status,
        message="error",
        headers=headers,
    )


@pytest.fixture
def fake_session():
    """Empty FakeSession."""
    return FakeSession()


@pytest.fixture
def session_manager(fake_session):
    """FakeSessionManager around the fake_session fixture."""
    return FakeSessionManager(fake_session)


@pytest.fixture
def consent_html():
    """Consent page with name-first hidden inputs."""
    return load_consent_page("consent_name_first.html")


@pytest.fixture
def fast_path_session(fake_session):
    """Session where the crumb endpoint answers directly."""
    fake_session.add("GET", ENDPOINTS["COOKIE_WARMUP"], FakeResponse(404, "not found"))
    fake_session.add("GET", ENDPOINTS["CRUMB"], FakeResponse(200, "abc"))
    return fake_session


@pytest.fixture
def consent_path_session(fake_session, consent_html):
    """Session where the crumb is only issued after consent."""
    fake_session.add("GET", ENDPOINTS["COOKIE_WARMUP"], FakeResponse(200, ""))
    fake_session.add(
        "GET",
        ENDPOINTS["CRUMB"],
        FakeResponse(401, "Unauthorized"),
        FakeResponse(200, "crumb-after-consent"),
    )
    fake_session.add("GET", ENDPOINTS["CONSENT_BOOTSTRAP"], FakeResponse(200, consent_html))
    fake_session.add("POST", ENDPOINTS["CONSENT_SUBMIT"], FakeResponse(200, "ok"))
    fake_session.add("GET", ENDPOINTS["CONSENT_COPY"], FakeResponse(200, "ok"))
    return fake_session
