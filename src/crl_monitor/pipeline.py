"""
Pipeline — one monitoring cycle over the base CRL and its delta CRL.

Each CRL goes through the same railway:

  fetch(url) → decode(bytes) → evaluate(info, now) → classify(thresholds)

The base CRL's failure fails the cycle. The delta CRL (same URL with "+"
before ".crl") is skipped, or its failure is fatal or merely noted,
depending on the caller's CheckPolicy. The decoder is invoked identically
for both.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from railway import ErrorCode, FailureDescription
from railway.result import Result

from crl_monitor.domain.freshness import classify, evaluate
from crl_monitor.domain.models import (
    CheckPolicy,
    CrlCheck,
    CrlInfo,
    CrlKind,
    MonitorReport,
    Thresholds,
)
from crl_monitor.domain.ports import CrlDecoder, CrlFetcher

log = structlog.get_logger()

CRL_SUFFIX = ".crl"
DELTA_MARKER = "+"


def derive_delta_url(url: str) -> Result[str]:
    """
    Insert "+" before the final ".crl": .../name.crl → .../name+.crl

    This is the publishing convention of Microsoft AD CS for delta CRLs.
    """
    if not url.lower().endswith(CRL_SUFFIX):
        return Result.failure(
            ErrorCode.CONFIGURATION_ERROR,
            f"CRL URL must end with {CRL_SUFFIX!r}: {url}",
            subject=url,
        )
    cut = len(url) - len(CRL_SUFFIX)
    return Result.success(url[:cut] + DELTA_MARKER + url[cut:])


def check_crl(
    kind: CrlKind,
    url: str,
    thresholds: Thresholds,
    fetcher: CrlFetcher,
    decoder: CrlDecoder,
    now: datetime,
) -> Result[CrlCheck]:
    """Run fetch → decode → evaluate → classify for a single CRL."""

    def _to_check(info: CrlInfo) -> CrlCheck:
        freshness = evaluate(info, now)
        return CrlCheck(
            kind=kind,
            url=url,
            info=info,
            freshness=freshness,
            thresholds=thresholds,
            severity=classify(freshness, thresholds),
        )

    return (
        fetcher.fetch(url)
        .flat_map(decoder.decode)
        .map(_to_check)
        .peek(
            lambda check: log.info(
                "crl.checked",
                kind=kind.value,
                is_valid=check.freshness.is_valid,
                age_hours=check.freshness.age_hours,
                expires_in_hours=check.freshness.expires_in_hours,
                severity=check.severity.name,
            )
        )
    )


def _attach_delta(
    base: CrlCheck,
    policy: CheckPolicy,
    fetcher: CrlFetcher,
    decoder: CrlDecoder,
    now: datetime,
) -> Result[MonitorReport]:
    if policy.skip_delta:
        log.info("delta.skipped")
        return Result.success(MonitorReport(base=base))

    delta = derive_delta_url(policy.url).flat_map(
        lambda delta_url: check_crl(CrlKind.DELTA, delta_url, policy.delta, fetcher, decoder, now)
    )
    if delta.is_success():
        return Result.success(MonitorReport(base=base, delta=delta.value()))

    failure = delta.error()
    if policy.delta_failure_fatal:
        return Result.failure_from(_as_delta_failure(failure))

    log.warning("delta.failed_non_fatal", failure=str(failure))
    return Result.success(MonitorReport(base=base, delta_failure=failure))


def _as_delta_failure(failure: FailureDescription) -> FailureDescription:
    return FailureDescription(
        code=failure.code,
        message=f"Delta CRL: {failure.message}",
        exception=failure.exception,
        subject=failure.subject,
        timestamp=failure.timestamp,
    )


def run_check(
    policy: CheckPolicy,
    fetcher: CrlFetcher,
    decoder: CrlDecoder,
    now: datetime,
) -> Result[MonitorReport]:
    """
    Execute one monitoring cycle.

    Returns Result[MonitorReport] on success, or the first fatal failure:
    any base CRL failure, or a delta failure when policy.delta_failure_fatal.
    """
    return check_crl(CrlKind.BASE, policy.url, policy.base, fetcher, decoder, now).flat_map(
        lambda base: _attach_delta(base, policy, fetcher, decoder, now)
    )
