"""
Shared test helpers for the crl-monitor test suite.

Builds small synthetic byte buffers that carry just the DER fragments the
anchor scanner looks for, so unit tests don't depend on real CRL files.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest
import structlog

CN_OID = b"\x06\x03\x55\x04\x03"
UTF8_STRING = b"\x0c"
UTC_TIME_TAG = b"\x17\x0d"


def cn_fragment(name: str, tag: bytes = UTF8_STRING) -> bytes:
    """OID 2.5.4.3 followed by a tagged, length-prefixed name."""
    encoded = name.encode("utf-8")
    return CN_OID + tag + bytes([len(encoded)]) + encoded


def utc_time_fragment(moment: datetime | str) -> bytes:
    """UTCTime tag + length + YYMMDDHHMMSSZ."""
    text = moment if isinstance(moment, str) else moment.strftime("%y%m%d%H%M%SZ")
    return UTC_TIME_TAG + text.encode("ascii")


def synthetic_crl(
    name: str = "Contoso CA",
    this_update: datetime | str = datetime(2024, 1, 1, tzinfo=UTC),
    next_update: datetime | str = datetime(2024, 6, 1, tzinfo=UTC),
) -> bytes:
    """
    A byte buffer laid out like the head of a DER CRL:

      SEQUENCE header | algorithm | issuer (… CN …) | thisUpdate | nextUpdate | trailer
    """
    return (
        b"\x30\x82\x01\x2a\x30\x82\x01\x10\x02\x01\x01"
        + b"\x30\x0d\x06\x09\x2a\x86\x48\x86\xf7\x0d\x01\x01\x0b\x05\x00"
        + b"\x30\x15\x31\x13\x30\x11"
        + cn_fragment(name)
        + utc_time_fragment(this_update)
        + utc_time_fragment(next_update)
        + b"\xa0\x2f\x30\x2d"
    )


@pytest.fixture()
def crl_bytes() -> bytes:
    """A well-formed synthetic CRL for Contoso CA, 2024-01-01 → 2024-06-01."""
    return synthetic_crl()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_structlog so no test logs into another test's captured stream."""
    yield
    structlog.reset_defaults()
