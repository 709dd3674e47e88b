"""
Consent negotiation for sessions that are refused a crumb.

When the crumb endpoint rejects a fresh session, Yahoo expects the client to
go through its consent page first. The page carries a CSRF token and a session
id in hidden inputs; both are scraped and later submitted with the consent form.
"""

from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urljoin, urlsplit

from ..core.config import CONSENT_FORM, CRUMB_CONFIG, ENDPOINTS
from ..core.errors import BuildError, ExtractionError
from ..core.logging import get_logger
from ..utils.html_tokens import CSRF_TOKEN_FIELD, SESSION_ID_FIELD, extract_token
from ..utils.network.http import fetch_text
from ..utils.network.session_manager import SessionManager


logger = get_logger(__name__)


@dataclass(frozen=True)
class Consent:
    """Values scraped from one consent page, valid for a single submission."""

    session_id: str
    csrf_token: str

    def form_payload(self) -> Dict[str, str]:
        """
        Build the consent form fields.

        Returns:
            A new mapping used for the form submission and the cookie copy
        """
        return {
            "agree": CONSENT_FORM["agree"],
            "consentUUID": CONSENT_FORM["consentUUID"],
            "sessionId": self.session_id,
            "csrfToken": self.csrf_token,
            "originalDoneUrl": CONSENT_FORM["originalDoneUrl"],
            "namespace": CONSENT_FORM["namespace"],
        }


def resolve_redirect(base_url: str, location: str) -> str:
    """
    Resolve a Location header against the URL that produced it.

    Raises:
        BuildError: If the result is not an absolute http(s) URL
    """
    try:
        target = urljoin(base_url, location.strip())
        parts = urlsplit(target)
    except ValueError as e:
        raise BuildError(f"Failed to parse the consent redirect: {location}") from e

    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise BuildError(f"Failed to parse the consent redirect: {location}")
    return target


class ConsentNegotiator:
    """
    Fetches the consent page and scrapes the tokens needed to submit it.

    Attributes:
        consent_url: Bootstrap endpoint of the consent flow
    """

    def __init__(self, session_manager: SessionManager, consent_url: Optional[str] = None):
        self._sessions = session_manager
        self.consent_url = consent_url or ENDPOINTS["CONSENT_BOOTSTRAP"]

    async def negotiate(self) -> Consent:
        """
        Obtain a session id and CSRF token from the consent page.

        Returns:
            Consent scraped from the page

        Raises:
            ExtractionError: If either token is missing from the page
            BuildError: If the bootstrap redirect cannot be followed
            APIError: On transport failures
        """
        html = await self._load_consent_page()

        csrf_token = self._extract(html, CSRF_TOKEN_FIELD)
        session_id = self._extract(html, SESSION_ID_FIELD)

        logger.debug("Scraped consent tokens from the consent page")
        return Consent(session_id=session_id, csrf_token=csrf_token)

    async def _load_consent_page(self) -> str:
        session = await self._sessions.get_session()
        response = await fetch_text(
            session,
            "GET",
            self.consent_url,
            "requesting the consent page",
            allow_redirects=False,
        )

        if not response.is_redirect:
            return response.text

        target = resolve_redirect(self.consent_url, response.headers["Location"])
        logger.debug(f"Consent bootstrap redirected to {target}")
        redirected = await fetch_text(
            session, "GET", target, "following the consent redirect"
        )
        return redirected.text

    @staticmethod
    def _extract(html: str, field_name: str) -> str:
        token = extract_token(html, field_name)
        if not token:
            excerpt = html[: CRUMB_CONFIG["EXCERPT_LENGTH"]]
            logger.warning(f"Could not find {field_name} in the consent page")
            raise ExtractionError(field_name, excerpt)
        return token
