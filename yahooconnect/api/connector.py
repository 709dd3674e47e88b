"""
Asynchronous connector for Yahoo Finance data endpoints.

Every request URL is enriched with the session crumb before it is sent.
Responses are returned as decoded JSON documents without further mapping.
"""

import json
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import quote

from aiohttp.abc import AbstractCookieJar

from ..core.config import ENDPOINTS, FUNDAMENTALS_START
from ..core.errors import BuildError, UnexpectedResponseError, classify_status
from ..core.logging import get_logger
from ..utils.network.http import build_url, fetch_text
from ..utils.network.session_manager import SessionManager
from .crumb import CrumbAcquirer, CrumbCache


logger = get_logger(__name__)

CHART_EVENTS = "div|split|capitalGains"
FUNDAMENTAL_PERIODS = ("annual", "quarterly")

# Characters yahoo expects unescaped in list-valued parameters
_LIST_SAFE = ",|"


class YahooConnector:
    """
    Client for the Yahoo Finance chart, search, quote summary, fundamentals and options APIs.

    Use as an async context manager, or call close() when done:

        async with YahooConnector() as conn:
            data = await conn.get_latest_quotes("AAPL", "1d")

    Attributes:
        crumb_cache: Cache of the crumb shared by all requests of this connector
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        cookie_jar: Optional[AbstractCookieJar] = None,
        max_crumb_attempts: Optional[int] = None,
        session_manager: Optional[SessionManager] = None,
    ):
        """
        Initialize the connector.

        Args:
            user_agent: User-Agent header for all requests
            timeout: Total request timeout in seconds
            cookie_jar: Cookie store shared by the crumb flow and data requests
            max_crumb_attempts: Crumb acquisition attempts per refresh (default: no retries)
            session_manager: Pre-built session manager; overrides the three options above
        """
        self._sessions = session_manager or SessionManager(
            user_agent=user_agent, timeout=timeout, cookie_jar=cookie_jar
        )
        self.crumb_cache = CrumbCache(
            CrumbAcquirer(self._sessions), max_attempts=max_crumb_attempts
        )

    async def __aenter__(self) -> "YahooConnector":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._sessions.close()

    async def get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        action: str = "fetching data",
    ) -> Dict[str, Any]:
        """
        Send a crumb-enriched GET request and decode the JSON response.

        A 401 response means the crumb was rejected; it is dropped and the
        request is sent once more with a fresh crumb.

        Args:
            url: Endpoint URL
            params: Query parameters appended before the crumb
            action: Description used in errors

        Returns:
            Decoded JSON document

        Raises:
            BuildError: If the URL is malformed
            APIError: On transport failures or non-success responses
        """
        base = build_url(url, params or {}, safe=_LIST_SAFE)

        for attempt in (1, 2):
            enriched = await self.crumb_cache.enrich(base)
            session = await self._sessions.get_session()
            response = await fetch_text(session, "GET", enriched, action)

            if response.status == 401 and attempt == 1:
                logger.info(f"Crumb rejected while {action}, refreshing")
                self.crumb_cache.invalidate()
                continue

            if not response.ok:
                raise classify_status(response.status, action, response.text, response.headers)
            break

        try:
            return json.loads(response.text)
        except ValueError as e:
            raise UnexpectedResponseError(
                action, cause=e, details={"reason": "response is not valid JSON"}
            ) from e

    @staticmethod
    def _symbol_url(endpoint: str, symbol: str) -> str:
        if not symbol:
            raise BuildError("Symbol must not be empty")
        return f"{ENDPOINTS[endpoint]}/{quote(symbol, safe='')}"

    async def get_quote_range(self, symbol: str, interval: str, range_: str) -> Dict[str, Any]:
        """Retrieve quotes for symbol over a named range such as ``1mo`` or ``5y``."""
        return await self.get_json(
            self._symbol_url("CHART", symbol),
            {"symbol": symbol, "interval": interval, "range": range_, "events": CHART_EVENTS},
            action=f"fetching quotes for {symbol}",
        )

    async def get_latest_quotes(self, symbol: str, interval: str) -> Dict[str, Any]:
        """Retrieve the quotes of the last month for symbol."""
        return await self.get_quote_range(symbol, interval, "1mo")

    async def get_quote_history(
        self, symbol: str, start: datetime, end: datetime, interval: str = "1d"
    ) -> Dict[str, Any]:
        """
        Retrieve the quote history for symbol from start to end (inclusive).

        Args:
            symbol: Ticker symbol
            start: First instant; naive datetimes are taken as local time
            end: Last instant
            interval: Bar size, e.g. ``1d`` or ``1h``
        """
        return await self.get_json(
            self._symbol_url("CHART", symbol),
            {
                "symbol": symbol,
                "period1": int(start.timestamp()),
                "period2": int(end.timestamp()),
                "interval": interval,
                "events": CHART_EVENTS,
            },
            action=f"fetching quote history for {symbol}",
        )

    async def get_quote_period_interval(
        self, symbol: str, period: str, interval: str, prepost: bool = False
    ) -> Dict[str, Any]:
        """Retrieve quotes for a period, optionally including pre/post market trading."""
        return await self.get_json(
            self._symbol_url("CHART", symbol),
            {
                "symbol": symbol,
                "period": period,
                "interval": interval,
                "includePrePost": "true" if prepost else "false",
            },
            action=f"fetching quotes for {symbol}",
        )

    async def search_ticker(self, name: str) -> Dict[str, Any]:
        """Search for quotes and news matching name."""
        return await self.get_json(
            ENDPOINTS["SEARCH"], {"q": name}, action=f"searching for {name}"
        )

    async def get_quote_summary(self, symbol: str, modules: Sequence[str]) -> Dict[str, Any]:
        """
        Retrieve quote summary modules, e.g. ``summaryDetail`` or ``assetProfile``.

        Raises:
            BuildError: If no module is requested
        """
        if not modules:
            raise BuildError("At least one quote summary module is required")

        return await self.get_json(
            self._symbol_url("QUOTE_SUMMARY", symbol),
            {
                "modules": ",".join(modules),
                "corsDomain": "finance.yahoo.com",
                "formatted": "false",
                "symbol": symbol,
            },
            action=f"fetching quote summary for {symbol}",
        )

    async def get_fundamentals(
        self,
        symbol: str,
        period: str,
        facts: Sequence[str],
        until: datetime,
    ) -> Dict[str, Any]:
        """
        Retrieve fundamentals time series such as ``NetIncome`` or ``TotalAssets``.

        Yahoo only returns the latest few records, so the range always starts in 2010.

        Args:
            symbol: Ticker symbol
            period: ``annual`` or ``quarterly``
            facts: Fact names without the period prefix
            until: End of the range

        Raises:
            BuildError: If the period is unknown or no fact is requested
        """
        if period not in FUNDAMENTAL_PERIODS:
            raise BuildError(f"Unknown fundamentals period: {period}")
        if not facts:
            raise BuildError("At least one fundamentals fact is required")

        return await self.get_json(
            self._symbol_url("FUNDAMENTALS", symbol),
            {
                "symbol": symbol,
                "period1": FUNDAMENTALS_START,
                "period2": int(until.timestamp()),
                "type": ",".join(f"{period}{fact}" for fact in facts),
            },
            action=f"fetching fundamentals for {symbol}",
        )

    async def get_options(self, symbol: str) -> Dict[str, Any]:
        """Retrieve the expiration dates, strikes and nearest option chain for symbol."""
        return await self.get_json(
            self._symbol_url("OPTIONS", symbol),
            action=f"fetching options for {symbol}",
        )

    async def get_option_chain(self, symbol: str, expiration: datetime) -> Dict[str, Any]:
        """
        Retrieve the option chain of symbol expiring at the given date.

        Args:
            symbol: Ticker symbol
            expiration: Expiration date, one of those listed by get_options
        """
        return await self.get_json(
            self._symbol_url("OPTIONS", symbol),
            {"date": int(expiration.timestamp())},
            action=f"fetching the option chain for {symbol}",
        )
