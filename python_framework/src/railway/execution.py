"""
Execution context — separate WHAT (pure logic) from HOW (side effects).

A pipeline function describes what happens and returns Result[T]; the
execution context decides how it runs (timing, logging, exception capture).

    ctx = LoggingExecutionContext(operation="CrlCheck")
    result = ctx.execute(lambda: run_check(policy, fetcher, decoder, now))
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result

T = TypeVar("T")
logger = logging.getLogger("railway.execution")


class LoggingExecutionContext:
    """
    Execution context that logs entry, exit, duration and result state.

    An exception escaping the computation is converted into a
    TECHNICAL_ERROR failure so the caller always receives a Result.
    """

    def __init__(self, operation: str = "unknown", log_level: int = logging.INFO) -> None:
        self._operation = operation
        self._log_level = log_level

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        logger.log(self._log_level, "[%s] Starting execution", self._operation)
        start = time.monotonic()

        try:
            result = computation()
        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "[%s] Execution failed after %.3fs: %s",
                self._operation,
                elapsed,
                e,
            )
            return Failure(
                FailureDescription(
                    ErrorCode.TECHNICAL_ERROR,
                    f"Execution failed: {e}",
                    e,
                )
            )

        elapsed = time.monotonic() - start
        state = "SUCCESS" if result.is_success() else "FAILURE"
        logger.log(
            self._log_level,
            "[%s] Completed in %.3fs — %s",
            self._operation,
            elapsed,
            state,
        )
        return result
