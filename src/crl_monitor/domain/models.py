"""
Domain models — immutable value objects for decoded CRLs and their freshness.

CrlInfo is what the decoder extracts from the raw bytes; FreshnessReport is
derived from a CrlInfo and an evaluation instant and is never stored.
MonitorReport aggregates one monitoring cycle (base CRL plus optional delta).

All models are frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, StrEnum

from railway import FailureDescription


class CrlField(StrEnum):
    """The CRL fields the decoder extracts. Used as failure subjects."""

    ISSUER_COMMON_NAME = "issuer_common_name"
    THIS_UPDATE = "this_update"
    NEXT_UPDATE = "next_update"


class CrlKind(StrEnum):
    BASE = "base"
    DELTA = "delta"


class Severity(Enum):
    """Alert state of one CRL, ordered by how bad it is."""

    OK = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True, slots=True)
class AnchorMatch:
    """
    A located anchor pattern and the byte range that follows it.

    `region` is a memoryview over the scanned buffer (no copy), covering
    data[start:end]. `anchor_offset` is where the anchor itself begins.
    """

    anchor_offset: int
    start: int
    end: int
    region: memoryview = field(repr=False, compare=False)

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class CrlInfo:
    """
    The three fields decoded from a CRL.

    Well-formed CRLs satisfy this_update <= next_update, but nothing here
    enforces it: malformed CRLs are reported as they are.
    """

    issuer_common_name: str
    this_update: datetime
    next_update: datetime


@dataclass(frozen=True, slots=True)
class FreshnessReport:
    """Freshness of a CrlInfo at one instant. Hours are truncated toward zero."""

    is_valid: bool
    age_hours: int
    expires_in_hours: int


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Expiry thresholds in hours: alert when expires_in_hours drops to or below them."""

    warning_hours: int
    error_hours: int


@dataclass(frozen=True, slots=True)
class CheckPolicy:
    """
    Caller-owned policy for one monitoring cycle.

    The decoder knows nothing about these settings; only the pipeline
    and the report renderer read them.
    """

    url: str
    base: Thresholds
    delta: Thresholds
    skip_delta: bool = False
    delta_failure_fatal: bool = False


@dataclass(frozen=True, slots=True)
class CrlCheck:
    """Outcome of the fetch → decode → evaluate pipeline for one CRL."""

    kind: CrlKind
    url: str
    info: CrlInfo
    freshness: FreshnessReport
    thresholds: Thresholds
    severity: Severity


@dataclass(frozen=True, slots=True)
class MonitorReport:
    """
    Everything one monitoring cycle produced.

    `delta` is None when the delta CRL was skipped or failed non-fatally;
    in the latter case `delta_failure` says why.
    """

    base: CrlCheck
    delta: CrlCheck | None = None
    delta_failure: FailureDescription | None = None

    @property
    def checks(self) -> list[CrlCheck]:
        return [c for c in (self.base, self.delta) if c is not None]

    @property
    def severity(self) -> Severity:
        return max((c.severity for c in self.checks), key=lambda s: s.value)
