"""
Failure description — structured error information for the failure track.

Every failure carries an ErrorCode from the monitor's error taxonomy, a
human-readable message, an optional subject (the element the failure is
about, e.g. the CRL field that could not be decoded) and the exception
that caused it, if any.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    Decode errors (the CRL bytes did not have the expected shape):
      ANCHOR_NOT_FOUND, MALFORMED_LENGTH, INVALID_TIME_FORMAT
    Boundary errors (something around the decoder failed):
      TRANSPORT_ERROR, CONFIGURATION_ERROR, TECHNICAL_ERROR, UNKNOWN_ERROR
    """

    # --- Decode errors ---
    ANCHOR_NOT_FOUND = "ANCHOR_NOT_FOUND"
    """An expected byte pattern occurs fewer times than required."""

    MALFORMED_LENGTH = "MALFORMED_LENGTH"
    """A declared field length exceeds the bytes available."""

    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
    """A UTCTime region does not match YYMMDDHHMMSSZ."""

    # --- Boundary errors ---
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    """The CRL could not be fetched (network, timeout, non-2xx, empty body)."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Invalid URL, thresholds or other settings."""

    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """An unexpected exception escaped a computation."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unclassified failure."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor.

    >>> desc = FailureDescription(ErrorCode.ANCHOR_NOT_FOUND, "UTCTime tag missing", subject="this_update")
    >>> desc.code
    <ErrorCode.ANCHOR_NOT_FOUND: 'ANCHOR_NOT_FOUND'>
    >>> desc.subject
    'this_update'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    subject: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def create(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
        subject: Optional[str] = None,
    ) -> FailureDescription:
        return FailureDescription(code=code, message=message, exception=exception, subject=subject)

    def about(self, subject: str, prefix: str = "") -> FailureDescription:
        """
        Return a copy attributed to `subject`, optionally prefixing the message.

        The code and exception are kept so callers can still tell *why*
        the failure happened after learning *where*.
        """
        message = f"{prefix}: {self.message}" if prefix else self.message
        return FailureDescription(
            code=self.code,
            message=message,
            exception=self.exception,
            subject=subject,
            timestamp=self.timestamp,
        )

    def __str__(self) -> str:
        where = f" [{self.subject}]" if self.subject else ""
        return f"{self.code.value}{where}: {self.message}"
