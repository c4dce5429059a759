"""
Freshness evaluation — pure functions over a decoded CRL and "now".

Nothing here is cached: validity depends on the evaluation instant, so a
FreshnessReport is recomputed every time it is needed.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from crl_monitor.domain.models import CrlInfo, FreshnessReport, Severity, Thresholds

_ONE_HOUR = timedelta(hours=1)


def _whole_hours(delta: timedelta) -> int:
    # int() truncates toward zero: -90 minutes is -1 hour, not -2
    return int(delta / _ONE_HOUR)


def _as_utc(moment: datetime) -> datetime:
    return moment.replace(tzinfo=UTC) if moment.tzinfo is None else moment


def evaluate(info: CrlInfo, now: datetime) -> FreshnessReport:
    """
    Compute validity, age and remaining lifetime of `info` at `now`.

    Total over any pair of timestamps: a thisUpdate in the future gives a
    negative age, an expired CRL gives a negative expires_in_hours.
    Naive datetimes, in `info` or `now`, are taken to be UTC.
    """
    now = _as_utc(now)
    this_update = _as_utc(info.this_update)
    next_update = _as_utc(info.next_update)
    return FreshnessReport(
        is_valid=now < next_update,
        age_hours=_whole_hours(now - this_update),
        expires_in_hours=_whole_hours(next_update - now),
    )


def classify(freshness: FreshnessReport, thresholds: Thresholds) -> Severity:
    """
    Map a FreshnessReport onto an alert state.

    ERROR when the CRL is no longer valid or expires within error_hours,
    WARNING when it expires within warning_hours, OK otherwise.
    """
    if not freshness.is_valid or freshness.expires_in_hours <= thresholds.error_hours:
        return Severity.ERROR
    if freshness.expires_in_hours <= thresholds.warning_hours:
        return Severity.WARNING
    return Severity.OK
