"""
Scheduler — optional periodic execution of the CRL check.

Infrastructure layer — uses APScheduler (3.x) for in-process scheduling
driven by a standard 5-field cron expression. Used when the monitor runs as
a long-lived process instead of being invoked once per sensor interval.

Each run executes within a LoggingExecutionContext (timing, outcome) and
its result is logged; rendering is left to the caller-supplied callback.

Graceful shutdown: handles SIGINT/SIGTERM to stop the scheduler cleanly.
"""

from __future__ import annotations

import signal
import sys
from collections.abc import Callable

import structlog
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from railway import LoggingExecutionContext
from railway.result import Result

from crl_monitor.domain.models import MonitorReport

log = structlog.get_logger()

JOB_ID = "crl_monitor_check"


def create_scheduler(
    check_fn: Callable[[], Result[MonitorReport]],
    cron: str = "*/15 * * * *",
    run_on_startup: bool = True,
    on_result: Callable[[Result[MonitorReport]], object] | None = None,
) -> BlockingScheduler:
    """
    Create a configured APScheduler that runs the check on a cron schedule.

    Args:
        check_fn: Zero-argument callable running one monitoring cycle.
        cron: Standard 5-field cron expression (minute hour dom month dow).
        run_on_startup: If True, execute once immediately before entering the loop.
        on_result: Optional callback receiving every cycle's Result.

    Returns:
        A configured BlockingScheduler (call .start() to begin).
    """
    scheduler = BlockingScheduler()
    ctx = LoggingExecutionContext(operation="CrlCheck")

    def _job() -> None:
        result = ctx.execute(check_fn)
        if result.is_success():
            report = result.value()
            log.info(
                "scheduler.job_completed",
                severity=report.severity.name,
                checks=len(report.checks),
            )
        else:
            log.error("scheduler.job_failed", failure=str(result.error()))
        if on_result is not None:
            on_result(result)

    minute, hour, dom, month, dow = cron.split()
    scheduler.add_job(
        _job,
        trigger=CronTrigger(
            minute=minute,
            hour=hour,
            day=dom,
            month=month,
            day_of_week=dow,
        ),
        id=JOB_ID,
        name="CRL freshness check",
        replace_existing=True,
    )

    if run_on_startup:
        log.info("scheduler.startup_run", message="Running check immediately on startup")
        _job()

    _register_shutdown_signals(scheduler)

    return scheduler


def _register_shutdown_signals(scheduler: BlockingScheduler) -> None:
    """Register SIGINT and SIGTERM handlers for graceful shutdown."""

    def _shutdown(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        log.info("scheduler.shutdown_requested", signal=sig_name)
        scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
