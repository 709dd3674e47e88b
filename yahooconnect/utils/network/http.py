"""
Request helpers shared by the crumb flow and the connector.

Every network call goes through fetch_text so that transport failures are
classified the same way everywhere, tagged with the action being performed.
"""

import asyncio
from typing import Any, Mapping, NamedTuple
from urllib.parse import urlencode, urlsplit, urlunsplit

import aiohttp

from ...core.errors import BuildError, classify_client_error


REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


class FetchedResponse(NamedTuple):
    """Status, headers and decoded body of a completed request."""

    status: int
    headers: Mapping[str, str]
    text: str

    @property
    def ok(self) -> bool:
        return self.status == 200

    @property
    def is_redirect(self) -> bool:
        return self.status in REDIRECT_STATUSES and "Location" in self.headers


async def fetch_text(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    action: str,
    raise_for_status: bool = False,
    **kwargs: Any,
) -> FetchedResponse:
    """
    Perform a request and read its body as text.

    Args:
        session: Session carrying the cookie jar
        method: HTTP method
        url: Request URL
        action: Description used when classifying failures, e.g. "obtaining the crumb"
        raise_for_status: Treat 4xx/5xx responses as failures
        **kwargs: Passed through to session.request (params, data, allow_redirects, ...)

    Returns:
        FetchedResponse for the completed request

    Raises:
        ConnectionFailedError, TooManyRequestsError, UnexpectedResponseError
    """
    try:
        async with session.request(method, url, **kwargs) as response:
            if raise_for_status:
                response.raise_for_status()
            text = await response.text(errors="replace")
            return FetchedResponse(response.status, response.headers, text)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise classify_client_error(e, action) from e


def build_url(base: str, params: Mapping[str, Any], safe: str = "") -> str:
    """
    Attach query parameters to a URL, after any query it already has.

    Values are form-urlencoded; characters listed in safe are kept as is.

    Raises:
        BuildError: If the URL has no scheme or host
    """
    try:
        parts = urlsplit(str(base))
    except ValueError as e:
        raise BuildError(f"Failed to parse the URL: {base}") from e

    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise BuildError(f"Failed to parse the URL: {base}")

    if not params:
        return urlunsplit(parts)

    extra = urlencode(params, safe=safe)
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
