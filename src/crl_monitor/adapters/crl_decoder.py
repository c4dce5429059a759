"""
CRL decoder — raw CRL bytes in, CrlInfo out.

Adapter layer — implements the CrlDecoder port by chaining the byte scanner
and the field extractor:

  raw bytes
    → CN anchor (1st)      → decode_common_name → issuer_common_name
    → UTCTime anchor (1st) → decode_utc_time    → this_update
    → UTCTime anchor (2nd) → decode_utc_time    → next_update
    → CrlInfo

The first failing step short-circuits the chain. Its failure keeps the
original code (ANCHOR_NOT_FOUND, MALFORMED_LENGTH, INVALID_TIME_FORMAT) and
names the field in `subject`. No partial CrlInfo, no retries: decoding the
same bytes again cannot give a different answer.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from railway import ErrorCode
from railway.result import Result

from crl_monitor.adapters.byte_scanner import (
    COMMON_NAME_ANCHOR,
    COMMON_NAME_OCCURRENCE,
    COMMON_NAME_REGION_LENGTH,
    NEXT_UPDATE_OCCURRENCE,
    THIS_UPDATE_OCCURRENCE,
    UTC_TIME_ANCHOR,
    UTC_TIME_LENGTH,
    find_anchored_region,
)
from crl_monitor.adapters.field_extractor import decode_common_name, decode_utc_time
from crl_monitor.domain.models import CrlField, CrlInfo

log = structlog.get_logger()

DECODE_ERROR_CODES = frozenset(
    {
        ErrorCode.ANCHOR_NOT_FOUND,
        ErrorCode.MALFORMED_LENGTH,
        ErrorCode.INVALID_TIME_FORMAT,
    }
)


def _issuer_common_name(data: bytes) -> Result[str]:
    return (
        find_anchored_region(
            data,
            COMMON_NAME_ANCHOR,
            COMMON_NAME_OCCURRENCE,
            max_region_length=COMMON_NAME_REGION_LENGTH,
        )
        .flat_map(lambda match: decode_common_name(match.region))
        .map_failure(lambda err: err.about(CrlField.ISSUER_COMMON_NAME, "Issuer common name"))
    )


def _this_update(data: bytes) -> Result[datetime]:
    # Bounded by the next UTCTime tag, i.e. the start of nextUpdate
    return (
        find_anchored_region(
            data,
            UTC_TIME_ANCHOR,
            THIS_UPDATE_OCCURRENCE,
            boundary=UTC_TIME_ANCHOR,
        )
        .flat_map(lambda match: decode_utc_time(match.region))
        .map_failure(lambda err: err.about(CrlField.THIS_UPDATE, "thisUpdate"))
    )


def _next_update(data: bytes) -> Result[datetime]:
    # Pinned to the 13-byte value; nothing after it is read
    return (
        find_anchored_region(
            data,
            UTC_TIME_ANCHOR,
            NEXT_UPDATE_OCCURRENCE,
            max_region_length=UTC_TIME_LENGTH,
        )
        .flat_map(lambda match: decode_utc_time(match.region))
        .map_failure(lambda err: err.about(CrlField.NEXT_UPDATE, "nextUpdate"))
    )


def decode_crl(data: bytes) -> Result[CrlInfo]:
    """
    Decode issuer CN, thisUpdate and nextUpdate from raw CRL bytes.

    Fields are tried in that order; the first failure is returned and the
    remaining fields are not looked at.
    """
    return _issuer_common_name(data).flat_map(
        lambda name: _this_update(data).flat_map(
            lambda this_update: _next_update(data).map(
                lambda next_update: CrlInfo(
                    issuer_common_name=name,
                    this_update=this_update,
                    next_update=next_update,
                )
            )
        )
    )


class AnchorCrlDecoder:
    """
    CrlDecoder port implementation backed by decode_crl.

    Adds structured logging around the pure decode function.
    """

    def decode(self, data: bytes) -> Result[CrlInfo]:
        return (
            decode_crl(data)
            .peek(
                lambda info: log.info(
                    "crl.decoded",
                    issuer=info.issuer_common_name,
                    this_update=info.this_update.isoformat(),
                    next_update=info.next_update.isoformat(),
                )
            )
            .peek_failure(
                lambda err: log.warning(
                    "crl.decode_failed",
                    field=err.subject,
                    code=err.code.value,
                    error=err.message,
                    size_bytes=len(data),
                )
            )
        )
