"""
Field extractor — decode the byte regions located by the scanner.

Both functions are pure: bytes in, Result out.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TypeAlias

from railway import ErrorCode
from railway.result import Result

from crl_monitor.adapters.byte_scanner import UTC_TIME_LENGTH

Region: TypeAlias = bytes | bytearray | memoryview

# YYMMDDHHMMSSZ
_UTC_TIME = re.compile(rb"(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})Z")

# Two-digit years are always 20YY. Dates before 2000 or after 2099 decode
# to the wrong century; RFC 5280's 1950 pivot is intentionally not applied.
CENTURY = 2000


def decode_common_name(region: Region) -> Result[str]:
    """
    Decode `[tag][length][length bytes of text]` into a string.

    The tag (UTF8String, PrintableString, ...) is not checked. The length is
    a single short-form byte. Text is decoded as UTF-8, which covers the
    ASCII string types; invalid sequences become U+FFFD.
    """
    if len(region) < 2:
        return Result.failure(
            ErrorCode.MALFORMED_LENGTH,
            f"Name region has {len(region)} byte(s), need at least a tag and a length",
        )
    declared = region[1]
    available = len(region) - 2
    if declared > available:
        return Result.failure(
            ErrorCode.MALFORMED_LENGTH,
            f"Declared name length {declared} exceeds the {available} byte(s) available",
        )
    return Result.success(bytes(region[2 : 2 + declared]).decode("utf-8", errors="replace"))


def decode_utc_time(region: Region) -> Result[datetime]:
    """
    Decode the leading 13 bytes of `region` as an ASN.1 UTCTime (YYMMDDHHMMSSZ).

    Returns a timezone-aware UTC datetime, or Result.failure(INVALID_TIME_FORMAT)
    when the bytes are not 12 digits and a 'Z' or name an impossible date.
    """
    raw = bytes(region[:UTC_TIME_LENGTH])
    match = _UTC_TIME.fullmatch(raw)
    if match is None:
        return Result.failure(
            ErrorCode.INVALID_TIME_FORMAT,
            f"Expected YYMMDDHHMMSSZ, got {raw!r}",
        )
    yy, month, day, hour, minute, second = (int(part) for part in match.groups())
    return Result.from_computation(
        lambda: datetime(CENTURY + yy, month, day, hour, minute, second, tzinfo=UTC),
        ErrorCode.INVALID_TIME_FORMAT,
        f"Not a valid UTC time: {raw.decode('ascii')}",
    )
