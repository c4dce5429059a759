"""
Ports — Protocol-based interfaces for infrastructure adapters.

The monitoring pipeline depends on these contracts only:

  CrlFetcher  → raw CRL bytes from a URL (HTTP in production)
  CrlDecoder  → CrlInfo from raw bytes (anchor-scanning heuristic)

Adapters satisfy a port by implementing its methods; no inheritance.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from railway.result import Result

from crl_monitor.domain.models import CrlInfo


@runtime_checkable
class CrlFetcher(Protocol):
    """
    Port: retrieve the verbatim body of a CRL URL.

    Returns Result[bytes]; any transport problem is a TRANSPORT_ERROR
    failure, never an exception.
    """

    def fetch(self, url: str) -> Result[bytes]: ...


@runtime_checkable
class CrlDecoder(Protocol):
    """
    Port: decode issuer CN, thisUpdate and nextUpdate from raw CRL bytes.

    Failures carry one of the decode error codes and name the field that
    failed in FailureDescription.subject. Partial results are never returned.
    """

    def decode(self, data: bytes) -> Result[CrlInfo]: ...
