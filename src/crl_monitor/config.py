"""
Configuration — typed, validated settings loaded from environment/.env/CLI.

Uses pydantic-settings to:
  - Load from CRL_MONITOR_* environment variables
  - Fall back to a .env file
  - Accept command-line arguments when main() asks for them
  - Validate types and constraints before any CRL is fetched

Only AppSettings is a BaseSettings instance. Sub-settings are plain BaseModel
classes populated via env_nested_delimiter="__", so CRL_MONITOR_BASE__WARNING_HOURS
maps to base.warning_hours and, on the command line, --base.warning_hours.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crl_monitor.domain.models import CheckPolicy, Thresholds

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class ThresholdSettings(BaseModel):
    """
    Expiry thresholds for one CRL, in hours before nextUpdate.

    The sensor turns to warning when the CRL expires within warning_hours and
    to error within error_hours (or once it has expired).
    """

    warning_hours: int = Field(ge=0, description="Warn when expiring within this many hours")
    error_hours: int = Field(ge=0, description="Fail when expiring within this many hours")

    @model_validator(mode="after")
    def check_order(self) -> ThresholdSettings:
        if self.error_hours > self.warning_hours:
            raise ValueError(
                f"error_hours ({self.error_hours}) must not exceed "
                f"warning_hours ({self.warning_hours})"
            )
        return self

    def to_thresholds(self) -> Thresholds:
        return Thresholds(warning_hours=self.warning_hours, error_hours=self.error_hours)


class SchedulerSettings(BaseModel):
    """
    Optional periodic mode using a standard 5-field cron expression.

    Disabled by default: PRTG (or cron) runs the sensor once per interval.
    Format: minute hour day-of-month month day-of-week, e.g. "*/15 * * * *".
    """

    enabled: bool = Field(default=False, description="Run on a schedule instead of once")
    cron: str = Field(
        default="*/15 * * * *",
        description="Cron expression (5 fields: minute hour dom month dow)",
    )
    run_on_startup: bool = Field(default=True)

    @field_validator("cron")
    @classmethod
    def validate_cron(cls, value: str) -> str:
        """Reject expressions that don't have exactly 5 space-separated fields."""
        fields = value.strip().split()
        if len(fields) != 5:
            raise ValueError(
                f"Cron expression must have exactly 5 fields "
                f"(minute hour dom month dow), got {len(fields)}: {value!r}"
            )
        return value.strip()


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Command-line arguments (only when parsed by main)
      2. Environment variables (CRL_MONITOR_*)
      3. .env file
      4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CRL_MONITOR_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        cli_prog_name="crl-monitor",
    )

    url: str = Field(description="Base CRL URL, ending in .crl")
    base: ThresholdSettings = Field(
        default_factory=lambda: ThresholdSettings(warning_hours=24, error_hours=4)
    )
    delta: ThresholdSettings = Field(
        default_factory=lambda: ThresholdSettings(warning_hours=6, error_hours=1)
    )
    skip_delta: bool = Field(default=False, description="Do not check the delta CRL")
    delta_failure_fatal: bool = Field(
        default=False, description="Fail the sensor when the delta CRL cannot be checked"
    )
    scheduler: SchedulerSettings = Field(default_factory=lambda: SchedulerSettings())

    http_timeout_seconds: int = Field(default=30, ge=1)
    http_attempts: int = Field(default=3, ge=1)
    log_level: str = Field(default="WARNING")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Require an absolute http(s) URL whose path ends in .crl."""
        value = value.strip()
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"CRL URL must be an absolute http(s) URL: {value!r}")
        if parts.query or parts.fragment or not parts.path.lower().endswith(".crl"):
            raise ValueError(f"CRL URL must end with '.crl': {value!r}")
        return value

    def to_policy(self) -> CheckPolicy:
        return CheckPolicy(
            url=self.url,
            base=self.base.to_thresholds(),
            delta=self.delta.to_thresholds(),
            skip_delta=self.skip_delta,
            delta_failure_fatal=self.delta_failure_fatal,
        )
