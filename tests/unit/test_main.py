"""
Unit tests for the main module — composition root and sensor output.

Tests verify structlog configuration, settings loading, and the exit code
and PRTG output of one run, without real HTTP calls.
"""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from unittest.mock import patch

import httpx
import pytest
import respx
import structlog
from railway import ErrorCode, Result, ResultAssertions

from crl_monitor.domain.models import (
    CrlCheck,
    CrlInfo,
    CrlKind,
    FreshnessReport,
    MonitorReport,
    Severity,
    Thresholds,
)
from crl_monitor.main import (
    EXIT_CHECK_FAILED,
    EXIT_CONFIGURATION_ERROR,
    EXIT_OK,
    configure_structlog,
    emit,
    load_settings,
    main,
)
from tests.conftest import synthetic_crl

CRL_URL = "http://pki.example.com/CertEnroll/Contoso.crl"
DELTA_URL = "http://pki.example.com/CertEnroll/Contoso+.crl"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("CRL_MONITOR_"):
            monkeypatch.delenv(key)


class TestConfigureStructlog:
    """Verify structlog configuration function."""

    def test_configure_structlog_sets_log_level(self) -> None:
        """
        GIVEN log_level="WARNING"
        WHEN configure_structlog is called
        THEN structlog is configured (no exception raised).
        """
        configure_structlog("WARNING")
        assert structlog.get_logger() is not None

    def test_configure_structlog_invalid_level_falls_back(self) -> None:
        configure_structlog("NONEXISTENT")
        assert structlog.get_logger() is not None


class TestLoadSettings:
    def test_from_arguments(self) -> None:
        settings = ResultAssertions.assert_success(load_settings(["--url", CRL_URL]))
        assert settings.url == CRL_URL

    def test_invalid_url_is_configuration_error(self) -> None:
        result = load_settings(["--url", "http://pki.example.com/Contoso.cer"])
        ResultAssertions.assert_failure(result, ErrorCode.CONFIGURATION_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "url")


class TestEmit:
    def test_success_prints_report(self, capsys: pytest.CaptureFixture[str]) -> None:
        check = CrlCheck(
            kind=CrlKind.BASE,
            url=CRL_URL,
            info=CrlInfo("CA", datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 2, 1, tzinfo=UTC)),
            freshness=FreshnessReport(is_valid=True, age_hours=1, expires_in_hours=100),
            thresholds=Thresholds(24, 4),
            severity=Severity.OK,
        )
        code = emit(Result.success(MonitorReport(base=check)))
        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert ET.fromstring(out).find("error") is None

    def test_failure_prints_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = emit(Result.failure(ErrorCode.TRANSPORT_ERROR, "refused"))
        root = ET.fromstring(capsys.readouterr().out)
        assert code == EXIT_CHECK_FAILED
        assert root.findtext("error") == "1"


class TestMain:
    @respx.mock
    def test_single_run_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """
        GIVEN a reachable base CRL and delta CRL that expire far in the future
        WHEN main runs once
        THEN it prints a PRTG report with six channels and exits 0.
        """
        body = synthetic_crl(
            this_update=datetime(2024, 1, 1, tzinfo=UTC),
            next_update=datetime(2049, 1, 1, tzinfo=UTC),
        )
        respx.get(CRL_URL).mock(return_value=httpx.Response(200, content=body))
        respx.get(DELTA_URL).mock(return_value=httpx.Response(200, content=body))

        with pytest.raises(SystemExit) as exc:
            main(["--url", CRL_URL])

        assert exc.value.code == EXIT_OK
        root = ET.fromstring(capsys.readouterr().out)
        assert len(root.findall("result")) == 6
        assert root.findtext("text", "").startswith("Contoso CA:")

    @respx.mock
    def test_single_run_base_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        respx.get(CRL_URL).mock(return_value=httpx.Response(404))

        with pytest.raises(SystemExit) as exc:
            main(["--url", CRL_URL, "--http_attempts", "1"])

        assert exc.value.code == EXIT_CHECK_FAILED
        root = ET.fromstring(capsys.readouterr().out)
        assert root.findtext("error") == "1"
        assert "TRANSPORT_ERROR" in root.findtext("text", "")

    def test_configuration_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--url", "not a url"])

        assert exc.value.code == EXIT_CONFIGURATION_ERROR
        root = ET.fromstring(capsys.readouterr().out)
        assert "CONFIGURATION_ERROR" in root.findtext("text", "")

    def test_scheduled_mode_hands_over_to_scheduler(self) -> None:
        with patch("crl_monitor.main.create_scheduler") as create:
            main(["--url", CRL_URL, "--scheduler.enabled", "true"])

        create.assert_called_once()
        assert create.call_args.kwargs["cron"] == "*/15 * * * *"
        create.return_value.start.assert_called_once()
