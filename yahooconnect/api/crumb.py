"""
Crumb acquisition and caching.

Yahoo Finance requires a crumb query parameter on data requests. The crumb is
tied to the session cookies, so it is obtained once per session and shared by
all requests until it expires or is invalidated.

Acquisition has two paths:
- fast path: seed the session cookie, then ask the crumb endpoint directly
- fallback: negotiate consent, submit it, copy the consent cookies, then ask again
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..core.config import CRUMB_CONFIG, ENDPOINTS
from ..core.errors import UnexpectedResponseError, classify_status, format_error_details
from ..core.logging import get_logger
from ..utils.async_utils.retry import retry_async
from ..utils.network.http import build_url, fetch_text
from ..utils.network.session_manager import SessionManager
from .consent import Consent, ConsentNegotiator


logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Credential:
    """A crumb and the moment it stops being used."""

    value: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at


class CrumbAcquirer:
    """
    Obtains a fresh crumb from Yahoo Finance.

    The acquirer never retries on its own; a failure of the final crumb
    request is raised to the caller.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        negotiator: Optional[ConsentNegotiator] = None,
    ):
        """
        Initialize the acquirer.

        Args:
            session_manager: Provides the session whose cookies the crumb is tied to
            negotiator: Consent negotiator for the fallback path (default: one on the same session)
        """
        self._sessions = session_manager
        self._negotiator = negotiator or ConsentNegotiator(session_manager)

    async def acquire(self) -> str:
        """
        Obtain a crumb, negotiating consent if the fast path is refused.

        Returns:
            The crumb value

        Raises:
            APIError: On transport failures or a refused crumb request after consent
            ExtractionError: If the consent page cannot be scraped
        """
        session = await self._sessions.get_session()

        # Only the cookies set by this response matter
        await fetch_text(
            session, "GET", ENDPOINTS["COOKIE_WARMUP"], "obtaining the session cookie"
        )

        response = await fetch_text(session, "GET", ENDPOINTS["CRUMB"], "obtaining the crumb")
        if response.ok:
            logger.debug("Obtained crumb without consent negotiation")
            return self._crumb_from(response.text)

        logger.info(f"Crumb request refused with status {response.status}, negotiating consent")
        consent = await self._negotiator.negotiate()
        await self._submit_consent(consent)

        response = await fetch_text(
            session, "GET", ENDPOINTS["CRUMB"], "obtaining the crumb after consent"
        )
        if not response.ok:
            raise classify_status(
                response.status,
                "obtaining the crumb after consent",
                response.text,
                response.headers,
            )

        logger.info("Obtained crumb after consent negotiation")
        return self._crumb_from(response.text)

    async def _submit_consent(self, consent: Consent) -> None:
        session = await self._sessions.get_session()
        payload = consent.form_payload()

        await fetch_text(
            session,
            "POST",
            ENDPOINTS["CONSENT_SUBMIT"],
            "submitting the consent form",
            raise_for_status=True,
            data=payload,
        )
        await fetch_text(
            session,
            "GET",
            ENDPOINTS["CONSENT_COPY"],
            "copying the consent cookies",
            raise_for_status=True,
            params=payload,
        )

    @staticmethod
    def _crumb_from(body: str) -> str:
        crumb = body.strip()
        if not crumb:
            raise UnexpectedResponseError(
                "reading the crumb from the response", details={"reason": "empty body"}
            )
        return crumb


class CrumbCache:
    """
    Holds the current crumb and refreshes it on demand.

    Readers take the cached Credential without locking. When it is missing or
    expired, one task acquires a new crumb while the others wait on the lock
    and then reuse its result. Failures are never cached.

    Attributes:
        ttl: How long an acquired crumb is used
        max_attempts: Acquisition attempts per refresh; 1 disables retries
        retry_delay: Seconds between attempts when retries are enabled
    """

    def __init__(
        self,
        acquirer: CrumbAcquirer,
        ttl: Optional[timedelta] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._acquirer = acquirer
        self.ttl = timedelta(seconds=CRUMB_CONFIG["TTL_SECONDS"]) if ttl is None else ttl
        self.max_attempts = CRUMB_CONFIG["MAX_ATTEMPTS"] if max_attempts is None else max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.retry_delay = CRUMB_CONFIG["RETRY_DELAY"] if retry_delay is None else retry_delay
        self._clock = clock
        self._credential: Optional[Credential] = None
        self._lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def _valid_crumb(self) -> Optional[str]:
        credential = self._credential
        if credential is not None and not credential.is_expired(self._clock()):
            return credential.value
        return None

    async def get_crumb(self) -> str:
        """
        Return the cached crumb, acquiring a new one if needed.

        Returns:
            A crumb valid for the current session

        Raises:
            YahooError: If acquisition fails; the cache stays empty
        """
        crumb = self._valid_crumb()
        if crumb is not None:
            return crumb

        async with self._lock:
            # Another task may have refreshed while this one waited
            crumb = self._valid_crumb()
            if crumb is not None:
                return crumb

            self._credential = None
            try:
                crumb = await self._acquire()
            except Exception as e:
                logger.warning(f"Crumb acquisition failed: {format_error_details(e)}")
                raise

            self._credential = Credential(crumb, self._clock() + self.ttl)
            logger.debug(f"Cached new crumb until {self._credential.expires_at.isoformat()}")
            return crumb

    async def _acquire(self) -> str:
        if self.max_attempts > 1:
            return await retry_async(
                self._acquirer.acquire,
                max_attempts=self.max_attempts,
                delay=self.retry_delay,
            )
        return await self._acquirer.acquire()

    async def enrich(self, url: str) -> str:
        """
        Append the crumb to a URL's query string.

        Args:
            url: Request URL, with or without a query

        Returns:
            The URL with ``crumb=<value>`` appended

        Raises:
            BuildError: If the URL is malformed
            YahooError: If no crumb can be obtained
        """
        # Reject malformed URLs before paying for an acquisition
        build_url(url, {})
        crumb = await self.get_crumb()
        return build_url(url, {"crumb": crumb})

    def invalidate(self) -> None:
        """Forget the cached crumb so the next request acquires a new one."""
        if self._credential is not None:
            logger.debug("Invalidated cached crumb")
        self._credential = None
