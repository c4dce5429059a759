"""
Unit tests for the HTTP adapter — CRL download.

Uses respx to mock httpx HTTP calls (never makes real HTTP requests).

Test categories:
  - Success: 200 → Result.success(body)
  - HTTP errors: 404/500 → Result.failure(TRANSPORT_ERROR), not retried
  - Timeout/network: retried, then Result.failure (never raises)
  - Empty body: Result.failure(TRANSPORT_ERROR)
"""

from __future__ import annotations

import httpx
import pytest
import respx
from railway import ErrorCode, ResultAssertions

from crl_monitor.adapters.http_client import USER_AGENT, HttpCrlFetcher
from crl_monitor.domain.ports import CrlFetcher

CRL_URL = "http://pki.example.com/CertEnroll/Contoso%20CA.crl"
CRL_BODY = b"\x30\x82\x01\x2a" + b"\x00" * 16


@pytest.fixture()
def fetcher() -> HttpCrlFetcher:
    """Create an HttpCrlFetcher with a short timeout and three attempts."""
    return HttpCrlFetcher(timeout=5, attempts=3, max_backoff_seconds=0.1)


class TestFetchSuccess:
    """
    GIVEN a CRL distribution point that answers 200
    WHEN fetch is called
    THEN it returns the verbatim body.
    """

    def test_satisfies_port(self, fetcher: HttpCrlFetcher) -> None:
        assert isinstance(fetcher, CrlFetcher)

    @respx.mock
    def test_returns_body(self, fetcher: HttpCrlFetcher) -> None:
        respx.get(CRL_URL).mock(return_value=httpx.Response(200, content=CRL_BODY))
        result = fetcher.fetch(CRL_URL)
        ResultAssertions.assert_success_value(result, CRL_BODY)

    @respx.mock
    def test_sends_user_agent(self, fetcher: HttpCrlFetcher) -> None:
        route = respx.get(CRL_URL).mock(return_value=httpx.Response(200, content=CRL_BODY))
        fetcher.fetch(CRL_URL)
        assert route.calls.last.request.headers["User-Agent"] == USER_AGENT

    @respx.mock
    def test_follows_redirects(self, fetcher: HttpCrlFetcher) -> None:
        moved = "http://cdn.example.com/Contoso.crl"
        respx.get(CRL_URL).mock(return_value=httpx.Response(302, headers={"Location": moved}))
        respx.get(moved).mock(return_value=httpx.Response(200, content=CRL_BODY))
        result = fetcher.fetch(CRL_URL)
        ResultAssertions.assert_success_value(result, CRL_BODY)


class TestFetchHttpErrors:
    """
    GIVEN the server answers with an error status
    WHEN fetch is called
    THEN it returns Failure(TRANSPORT_ERROR) about the URL, without retrying.
    """

    @respx.mock
    @pytest.mark.parametrize("status", [403, 404, 500, 503])
    def test_error_status(self, fetcher: HttpCrlFetcher, status: int) -> None:
        route = respx.get(CRL_URL).mock(return_value=httpx.Response(status))
        result = fetcher.fetch(CRL_URL)
        error = ResultAssertions.assert_failure_about(result, CRL_URL, ErrorCode.TRANSPORT_ERROR)
        assert isinstance(error.exception, httpx.HTTPStatusError)
        assert route.call_count == 1

    @respx.mock
    def test_empty_body(self, fetcher: HttpCrlFetcher) -> None:
        respx.get(CRL_URL).mock(return_value=httpx.Response(200, content=b""))
        result = fetcher.fetch(CRL_URL)
        ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "empty")


class TestFetchTransientErrors:
    """
    GIVEN the server times out or the network fails
    WHEN fetch is called
    THEN it retries, then returns Failure (never raises).
    """

    @respx.mock
    def test_timeout_returns_failure_after_retries(self, fetcher: HttpCrlFetcher) -> None:
        route = respx.get(CRL_URL).mock(side_effect=httpx.ReadTimeout("timed out"))
        result = fetcher.fetch(CRL_URL)
        ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_ERROR)
        assert route.call_count == 3

    @respx.mock
    def test_connect_error_returns_failure(self, fetcher: HttpCrlFetcher) -> None:
        respx.get(CRL_URL).mock(side_effect=httpx.ConnectError("refused"))
        result = fetcher.fetch(CRL_URL)
        error = ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_ERROR)
        assert isinstance(error.exception, httpx.ConnectError)

    @respx.mock
    def test_recovers_when_retry_succeeds(self, fetcher: HttpCrlFetcher) -> None:
        route = respx.get(CRL_URL).mock(
            side_effect=[
                httpx.ConnectTimeout("slow"),
                httpx.Response(200, content=CRL_BODY),
            ]
        )
        result = fetcher.fetch(CRL_URL)
        ResultAssertions.assert_success_value(result, CRL_BODY)
        assert route.call_count == 2

    @respx.mock
    def test_single_attempt(self) -> None:
        route = respx.get(CRL_URL).mock(side_effect=httpx.ReadTimeout("timed out"))
        result = HttpCrlFetcher(timeout=1, attempts=1).fetch(CRL_URL)
        ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_ERROR)
        assert route.call_count == 1
