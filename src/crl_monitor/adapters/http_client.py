"""
HTTP adapter — fetch raw CRL bytes via httpx.

Adapter layer — implements the CrlFetcher port with a sync httpx GET.

Retry/backoff via tenacity on transient errors (network, timeout). HTTP
status errors are not retried. Every failure is captured into a
TRANSPORT_ERROR Result — no exception reaches the pipeline.
"""

from __future__ import annotations

import httpx
import structlog
from railway import ErrorCode
from railway.result import Result
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()

USER_AGENT = "crl-monitor"


class HttpCrlFetcher:
    """
    Download CRL files via HTTP GET.

    Implements the CrlFetcher port. `attempts` counts the first try.
    """

    def __init__(
        self,
        timeout: int = 30,
        attempts: int = 3,
        max_backoff_seconds: float = 10,
    ) -> None:
        self._timeout = timeout
        self._attempts = attempts
        self._max_backoff_seconds = max_backoff_seconds

    def fetch(self, url: str) -> Result[bytes]:
        """
        GET `url` and return the verbatim response body.

        Returns Result.failure(TRANSPORT_ERROR, ...) on network errors,
        timeouts, non-2xx statuses and empty bodies.
        """
        return (
            Result.from_computation(
                lambda: self._do_get_with_retry(url),
                ErrorCode.TRANSPORT_ERROR,
                f"Failed to fetch {url}",
            )
            .ensure(bool, ErrorCode.TRANSPORT_ERROR, f"Empty response body from {url}")
            .map_failure(lambda err: err.about(url))
        )

    def _do_get_with_retry(self, url: str) -> bytes:
        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=0.1, max=self._max_backoff_seconds),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        )
        return retrying(self._do_get, url)

    def _do_get(self, url: str) -> bytes:
        """HTTP GET — exceptions are caught by from_computation."""
        with httpx.Client(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = client.get(url)
            response.raise_for_status()
            data = response.content
            log.info("crl.fetched", url=url, status=response.status_code, size_bytes=len(data))
            return data
