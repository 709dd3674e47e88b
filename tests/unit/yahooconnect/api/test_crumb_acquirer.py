#!/usr/bin/env python3
"""
Tests for crumb acquisition: fast path and consent fallback.
"""

from unittest.mock import AsyncMock

import pytest

from yahooconnect.api.consent import Consent
from yahooconnect.api.crumb import CrumbAcquirer
from yahooconnect.core.config import ENDPOINTS
from yahooconnect.core.errors import (
    ConnectionFailedError,
    ExtractionError,
    TooManyRequestsError,
    UnexpectedResponseError,
)
from tests.fixtures.http_fixtures import FakeResponse, connector_error


EXPECTED_PAYLOAD = {
    "agree": "agree",
    "consentUUID": "default",
    "sessionId": "3_cc-session_abc",
    "csrfToken": "tk-AbC123_xyz",
    "originalDoneUrl": "https://finance.yahoo.com",
    "namespace": "yahoo",
}


class TestFastPath:
    """The crumb endpoint answers without consent."""

    @pytest.mark.asyncio
    async def test_returns_body_as_crumb(self, session_manager, fast_path_session):
        crumb = await CrumbAcquirer(session_manager).acquire()

        assert crumb == "abc"

    @pytest.mark.asyncio
    async def test_warms_up_cookie_first(self, session_manager, fast_path_session):
        await CrumbAcquirer(session_manager).acquire()

        urls = [c[1] for c in fast_path_session.calls]
        assert urls == [ENDPOINTS["COOKIE_WARMUP"], ENDPOINTS["CRUMB"]]

    @pytest.mark.asyncio
    async def test_does_not_negotiate(self, session_manager, fast_path_session):
        negotiator = AsyncMock()

        await CrumbAcquirer(session_manager, negotiator=negotiator).acquire()

        negotiator.negotiate.assert_not_called()

    @pytest.mark.asyncio
    async def test_strips_whitespace(self, session_manager, fake_session):
        fake_session.add("GET", ENDPOINTS["COOKIE_WARMUP"], FakeResponse(200, ""))
        fake_session.add("GET", ENDPOINTS["CRUMB"], FakeResponse(200, "  abc\n"))

        assert await CrumbAcquirer(session_manager).acquire() == "abc"

    @pytest.mark.asyncio
    async def test_empty_body(self, session_manager, fake_session):
        fake_session.add("GET", ENDPOINTS["COOKIE_WARMUP"], FakeResponse(200, ""))
        fake_session.add("GET", ENDPOINTS["CRUMB"], FakeResponse(200, ""))

        with pytest.raises(UnexpectedResponseError):
            await CrumbAcquirer(session_manager).acquire()

    @pytest.mark.asyncio
    async def test_warmup_connection_failure(self, session_manager, fake_session):
        fake_session.add("GET", ENDPOINTS["COOKIE_WARMUP"], connector_error())

        with pytest.raises(ConnectionFailedError) as exc_info:
            await CrumbAcquirer(session_manager).acquire()

        assert "obtaining the session cookie" in exc_info.value.message
        assert len(fake_session.calls) == 1


class TestConsentFallback:
    """The crumb endpoint refuses the session until consent is given."""

    @pytest.mark.asyncio
    async def test_returns_crumb_after_consent(self, session_manager, consent_path_session):
        crumb = await CrumbAcquirer(session_manager).acquire()

        assert crumb == "crumb-after-consent"

    @pytest.mark.asyncio
    async def test_request_sequence(self, session_manager, consent_path_session):
        await CrumbAcquirer(session_manager).acquire()

        steps = [(c[0], c[1]) for c in consent_path_session.calls]
        assert steps == [
            ("GET", ENDPOINTS["COOKIE_WARMUP"]),
            ("GET", ENDPOINTS["CRUMB"]),
            ("GET", ENDPOINTS["CONSENT_BOOTSTRAP"]),
            ("POST", ENDPOINTS["CONSENT_SUBMIT"]),
            ("GET", ENDPOINTS["CONSENT_COPY"]),
            ("GET", ENDPOINTS["CRUMB"]),
        ]

    @pytest.mark.asyncio
    async def test_submits_form_and_copies_cookies(self, session_manager, consent_path_session):
        await CrumbAcquirer(session_manager).acquire()

        submit = consent_path_session.calls_to(ENDPOINTS["CONSENT_SUBMIT"], method="POST")
        copy = consent_path_session.calls_to(ENDPOINTS["CONSENT_COPY"])
        assert submit[0][2]["data"] == EXPECTED_PAYLOAD
        assert copy[0][2]["params"] == EXPECTED_PAYLOAD

    @pytest.mark.asyncio
    async def test_uses_supplied_negotiator(self, session_manager, consent_path_session):
        negotiator = AsyncMock()
        negotiator.negotiate.return_value = Consent(session_id="s", csrf_token="c")

        await CrumbAcquirer(session_manager, negotiator=negotiator).acquire()

        negotiator.negotiate.assert_awaited_once()
        submit = consent_path_session.calls_to(ENDPOINTS["CONSENT_SUBMIT"], method="POST")
        assert submit[0][2]["data"]["sessionId"] == "s"
        assert submit[0][2]["data"]["csrfToken"] == "c"

    @pytest.mark.asyncio
    async def test_refused_after_consent(self, session_manager, consent_path_session):
        consent_path_session.routes[("GET", ENDPOINTS["CRUMB"])] = [
            FakeResponse(401, "Unauthorized"),
            FakeResponse(403, "Forbidden"),
        ]

        with pytest.raises(UnexpectedResponseError) as exc_info:
            await CrumbAcquirer(session_manager).acquire()

        assert exc_info.value.details["status_code"] == 403
        # No further attempts inside the acquirer
        assert len(consent_path_session.calls_to(ENDPOINTS["CRUMB"])) == 2

    @pytest.mark.asyncio
    async def test_rate_limited_after_consent(self, session_manager, consent_path_session):
        consent_path_session.routes[("GET", ENDPOINTS["CRUMB"])] = [
            FakeResponse(401, "Unauthorized"),
            FakeResponse(429, "Too Many Requests", headers={"Retry-After": "3"}),
        ]

        with pytest.raises(TooManyRequestsError) as exc_info:
            await CrumbAcquirer(session_manager).acquire()

        assert exc_info.value.action == "obtaining the crumb after consent"
        assert exc_info.value.retry_after == 3.0

    @pytest.mark.asyncio
    async def test_consent_submit_failure(self, session_manager, consent_path_session):
        consent_path_session.routes[("POST", ENDPOINTS["CONSENT_SUBMIT"])] = [
            FakeResponse(500, "error")
        ]

        with pytest.raises(UnexpectedResponseError) as exc_info:
            await CrumbAcquirer(session_manager).acquire()

        assert exc_info.value.action == "submitting the consent form"

    @pytest.mark.asyncio
    async def test_extraction_failure_propagates(self, session_manager, consent_path_session):
        consent_path_session.routes[("GET", ENDPOINTS["CONSENT_BOOTSTRAP"])] = [
            FakeResponse(200, "<html>no form here</html>")
        ]

        with pytest.raises(ExtractionError):
            await CrumbAcquirer(session_manager).acquire()

        assert not consent_path_session.calls_to(ENDPOINTS["CONSENT_SUBMIT"], method="POST")
