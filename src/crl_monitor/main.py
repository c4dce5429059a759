"""
Application entry point — the `crl-monitor` sensor command.

Composition root: creates the concrete adapters, wires them into the
pipeline and either runs one check or hands it to the scheduler.

Responsibilities:
  1. Load and validate settings (environment, .env, command line)
  2. Configure structlog (stderr; stdout carries only the sensor XML)
  3. Create the HTTP fetcher and the anchor-scanning decoder
  4. Run the check once and print the PRTG report, or schedule it
  5. Collapse every failure into one PRTG error document and exit code

Exit codes: 0 report rendered, 1 check failed, 2 configuration error.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from datetime import UTC, datetime
from functools import partial

import structlog
from pydantic import ValidationError
from railway import ErrorCode, FailureDescription
from railway.result import Result

from crl_monitor import __version__
from crl_monitor.adapters.crl_decoder import AnchorCrlDecoder
from crl_monitor.adapters.http_client import HttpCrlFetcher
from crl_monitor.adapters.prtg_report import render_failure, render_report
from crl_monitor.config import AppSettings
from crl_monitor.domain.models import CheckPolicy, MonitorReport
from crl_monitor.domain.ports import CrlDecoder, CrlFetcher
from crl_monitor.pipeline import run_check
from crl_monitor.scheduler import create_scheduler

EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_CONFIGURATION_ERROR = 2


def configure_structlog(log_level: str = "WARNING") -> None:
    """
    Configure structlog for human-readable key/value logging on stderr.

    Unknown level names fall back to WARNING.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def check_now(
    policy: CheckPolicy,
    fetcher: CrlFetcher,
    decoder: CrlDecoder,
) -> Result[MonitorReport]:
    """Run one monitoring cycle against the current UTC time."""
    return run_check(policy, fetcher, decoder, now=datetime.now(UTC))


def emit(result: Result[MonitorReport]) -> int:
    """Print the PRTG document for `result` and return the matching exit code."""
    print(result.either(render_report, render_failure))  # noqa: T201
    return EXIT_OK if result.is_success() else EXIT_CHECK_FAILED


def _configuration_failure(error: Exception) -> FailureDescription:
    if isinstance(error, ValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in e['loc']) or 'settings'}: {e['msg']}"
            for e in error.errors()
        )
    else:
        problems = str(error)
    return FailureDescription.create(
        ErrorCode.CONFIGURATION_ERROR,
        f"Invalid configuration: {problems}",
        error,
    )


def load_settings(argv: Sequence[str] | None = None) -> Result[AppSettings]:
    """Build AppSettings from the environment and `argv` (sys.argv[1:] when None)."""
    cli_args: bool | list[str] = True if argv is None else list(argv)
    try:
        return Result.success(AppSettings(_cli_parse_args=cli_args))  # type: ignore[call-arg]
    except (ValidationError, ValueError) as e:
        return Result.failure_from(_configuration_failure(e))


def main(argv: Sequence[str] | None = None) -> None:
    """Wire dependencies, run the check (once or scheduled) and exit."""
    loaded = load_settings(argv)
    if loaded.is_failure():
        print(render_failure(loaded.error()))  # noqa: T201
        sys.exit(EXIT_CONFIGURATION_ERROR)
    settings = loaded.value()

    configure_structlog(settings.log_level)
    log = structlog.get_logger()
    log.info(
        "app.starting",
        version=__version__,
        url=settings.url,
        skip_delta=settings.skip_delta,
        scheduled=settings.scheduler.enabled,
    )

    check_fn = partial(
        check_now,
        policy=settings.to_policy(),
        fetcher=HttpCrlFetcher(
            timeout=settings.http_timeout_seconds,
            attempts=settings.http_attempts,
        ),
        decoder=AnchorCrlDecoder(),
    )

    if not settings.scheduler.enabled:
        sys.exit(emit(check_fn()))

    scheduler = create_scheduler(
        check_fn=check_fn,
        cron=settings.scheduler.cron,
        run_on_startup=settings.scheduler.run_on_startup,
        on_result=emit,
    )
    log.info("app.scheduler_starting", cron=settings.scheduler.cron)
    try:
        scheduler.start()
    except KeyboardInterrupt:
        log.info("app.shutdown", reason="signal received")
    except SystemExit:
        log.info("app.shutdown", reason="signal received")
        raise
    except Exception as e:
        log.error("app.fatal_error", error=str(e))
        sys.exit(EXIT_CHECK_FAILED)


if __name__ == "__main__":
    main()
