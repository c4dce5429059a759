"""
PRTG report adapter — render a monitoring cycle as PRTG EXE/XML sensor output.

Success:

  <prtg>
    <result><channel>Base CRL expires in</channel><value>123</value>...</result>
    ...
    <text>Contoso CA: base CRL next update 2024-06-01 00:00 UTC (in 123 h)</text>
  </prtg>

Failure (every failure kind collapses into this one shape):

  <prtg><error>1</error><text>ANCHOR_NOT_FOUND [this_update]: ...</text></prtg>

Warning/error states come from the channel limits on the "expires in"
channels, so PRTG alerts even if the thresholds are edited in PRTG itself.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime

from railway import FailureDescription

from crl_monitor.domain.models import CrlCheck, MonitorReport, Severity

# PRTG truncates sensor messages at 2000 characters
MAX_TEXT_LENGTH = 2000

BOOLEAN_LOOKUP = "prtg.standardlookups.boolean.statetrueok"
LIMIT_MODE_ENABLED = "1"


def _element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = text
    return child


def _channel(root: ET.Element, name: str, value: int, **settings: str) -> ET.Element:
    result = ET.SubElement(root, "result")
    _element(result, "channel", name)
    _element(result, "value", str(value))
    for tag, text in settings.items():
        _element(result, tag, text)
    return result


def _prtg_limit(threshold_hours: int) -> int:
    # PRTG alerts below LimitMin; classify() alerts at or below the threshold
    return threshold_hours + 1


def _add_channels(root: ET.Element, check: CrlCheck) -> None:
    label = f"{check.kind.value.capitalize()} CRL"
    freshness = check.freshness
    _channel(root, f"{label} valid", int(freshness.is_valid), valuelookup=BOOLEAN_LOOKUP)
    _channel(root, f"{label} age", freshness.age_hours, unit="Custom", customunit="h")
    _channel(
        root,
        f"{label} expires in",
        freshness.expires_in_hours,
        unit="Custom",
        customunit="h",
        limitmode=LIMIT_MODE_ENABLED,
        limitminwarning=str(_prtg_limit(check.thresholds.warning_hours)),
        limitminerror=str(_prtg_limit(check.thresholds.error_hours)),
    )


def _format_time(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M UTC")


def _describe(check: CrlCheck) -> str:
    hours = check.freshness.expires_in_hours
    if check.freshness.is_valid:
        remaining = f"in {hours} h"
    else:
        remaining = f"expired {abs(hours)} h ago"
    return (
        f"{check.kind.value} CRL next update "
        f"{_format_time(check.info.next_update)} ({remaining})"
    )


def _summary(report: MonitorReport) -> str:
    parts = [_describe(check) for check in report.checks]
    text = f"{report.base.info.issuer_common_name}: " + "; ".join(parts)
    if report.delta_failure is not None:
        text += f"; delta CRL not checked ({report.delta_failure})"
    if report.severity is not Severity.OK:
        text = f"{report.severity.name}: {text}"
    return text[:MAX_TEXT_LENGTH]


def _serialize(root: ET.Element) -> str:
    ET.indent(root)
    return ET.tostring(root, encoding="unicode")


def render_report(report: MonitorReport) -> str:
    """Render a successful monitoring cycle as a PRTG <prtg> document."""
    root = ET.Element("prtg")
    for check in report.checks:
        _add_channels(root, check)
    _element(root, "text", _summary(report))
    return _serialize(root)


def render_failure(failure: FailureDescription) -> str:
    """Render any failure as a PRTG sensor error."""
    root = ET.Element("prtg")
    _element(root, "error", "1")
    _element(root, "text", str(failure)[:MAX_TEXT_LENGTH])
    return _serialize(root)
