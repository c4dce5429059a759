"""
Byte scanner — locate fixed anchor patterns inside raw CRL bytes.

This is deliberately NOT an ASN.1 parser. The three fields we need are each
preceded by a short, distinctive DER byte sequence:

  issuer CN      06 03 55 04 03   OBJECT IDENTIFIER 2.5.4.3 (id-at-commonName)
  thisUpdate     17 0D            UTCTime, 13 bytes (1st occurrence)
  nextUpdate     17 0D            UTCTime, 13 bytes (2nd occurrence)

so finding the Nth occurrence of the pattern is enough to land on the value.

Known limitation: the heuristic mis-locates a field when the anchor bytes
also occur earlier inside unrelated data (a serial number, a name, an
extension value), when nextUpdate is absent (the 2nd UTCTime is then a
revocationDate) or when a date is encoded as GeneralizedTime (tag 0x18,
used from 2050 on). A structural decoder would behave differently on such
inputs, so swapping one in is a behavior change, not a refactor.
"""

from __future__ import annotations

from railway import ErrorCode
from railway.result import Result

from crl_monitor.domain.models import AnchorMatch

# ─────────────────────── Anchors ───────────────────────

COMMON_NAME_ANCHOR = b"\x06\x03\x55\x04\x03"
UTC_TIME_ANCHOR = b"\x17\x0d"

COMMON_NAME_OCCURRENCE = 0
THIS_UPDATE_OCCURRENCE = 0
NEXT_UPDATE_OCCURRENCE = 1

# [string tag][length byte][at most 255 bytes of text]
COMMON_NAME_REGION_LENGTH = 2 + 0xFF
UTC_TIME_LENGTH = 13


def find_anchor(data: bytes, anchor: bytes, occurrence: int) -> int:
    """
    Offset of the `occurrence`-th (zero-based) non-overlapping match, or -1.

    Non-overlapping: after a match the search resumes right after it, so
    b"\\x17\\x0d\\x17\\x0d" holds two UTCTime anchors, never three.
    """
    if not anchor:
        raise ValueError("anchor pattern must not be empty")
    if occurrence < 0:
        raise ValueError(f"occurrence must be >= 0, got {occurrence}")

    position = -len(anchor)
    for _ in range(occurrence + 1):
        position = data.find(anchor, position + len(anchor))
        if position == -1:
            return -1
    return position


def find_anchored_region(
    data: bytes,
    anchor: bytes,
    occurrence: int,
    max_region_length: int | None = None,
    boundary: bytes | None = None,
) -> Result[AnchorMatch]:
    """
    Locate the region that follows the `occurrence`-th match of `anchor`.

    With `max_region_length` the region is the next `max_region_length` bytes,
    clamped to the end of `data`. Without it, the region runs to the first
    occurrence of `boundary` after the anchor, or to the end of `data` when
    no boundary is given or found.

    Returns Result.failure(ANCHOR_NOT_FOUND) when the anchor occurs fewer than
    `occurrence + 1` times. Any input bytes are accepted; only invalid
    arguments raise ValueError.
    """
    if max_region_length is not None and max_region_length < 0:
        raise ValueError(f"max_region_length must be >= 0, got {max_region_length}")

    offset = find_anchor(data, anchor, occurrence)
    if offset == -1:
        return Result.failure(
            ErrorCode.ANCHOR_NOT_FOUND,
            f"Anchor {anchor.hex(' ')} occurs fewer than {occurrence + 1} time(s) "
            f"in {len(data)} bytes",
        )

    start = offset + len(anchor)
    if max_region_length is not None:
        end = min(start + max_region_length, len(data))
    elif boundary:
        found = data.find(boundary, start)
        end = len(data) if found == -1 else found
    else:
        end = len(data)

    return Result.success(
        AnchorMatch(
            anchor_offset=offset,
            start=start,
            end=end,
            region=memoryview(data)[start:end],
        )
    )
