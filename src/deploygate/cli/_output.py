from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

from deploygate import __version__
from deploygate.core._types import Severity, Status

if TYPE_CHECKING:
    from deploygate.core.finding import Finding, Report
    from deploygate.core.rule import Rule

_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.BLOCKING: "\033[31m",  # red
    Severity.WARNING: "\033[33m",  # yellow
}
_STATUS_COLORS: dict[Status, str] = {
    Status.BLOCKED: "\033[31m",
    Status.PASS_WITH_WARNINGS: "\033[33m",
    Status.PASS: "\033[32m",
}
_GREEN = "\033[32m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RESET = "\033[0m"

_LINE_WIDTH = 66


def _use_color(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


def _c(text: str, code: str, *, color: bool) -> str:
    if not color:
        return text
    return f"{code}{text}{_RESET}"


def _section(title: str, *, color: bool) -> str:
    header = f"── {title} "
    fill = "─" * max(0, _LINE_WIDTH - len(header))
    return _c(header + fill, _BOLD, color=color)


def format_text(report: Report, *, directory: str, no_color: bool = False) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    w(f"deploygate {__version__}")
    w("")
    w(f"Checking {directory} ...")
    w("")
    w(_section("Checks", color=color))

    id_w = max((len(f.rule_id) for f in report.findings), default=0)
    for f in report.findings:
        rule_id = _c(f.rule_id.ljust(id_w), _BOLD, color=color)
        if f.passed:
            w(f"  {rule_id}  {_c('ok  ', _GREEN, color=color)}  {f.message}")
        else:
            sev_color = _SEVERITY_COLORS.get(f.severity, "")
            w(f"  {rule_id}  {_c('FAIL', sev_color, color=color)}  {f.message}")

    if report.blocking_failures:
        w("")
        w(_section("Blocking", color=color))
        lines.extend(_failure_lines(report.blocking_failures, color=color))
    if report.warning_failures:
        w("")
        w(_section("Warnings", color=color))
        lines.extend(_failure_lines(report.warning_failures, color=color))

    w("")
    w(_summary_line(report, color=color))
    return "\n".join(lines)


def _failure_lines(findings: list[Finding], *, color: bool) -> list[str]:
    lines: list[str] = []
    for f in findings:
        sev_color = _SEVERITY_COLORS.get(f.severity, "")
        tag = _c(f"[{f.rule_id}]", _BOLD, color=color)
        lines.append(f"  {tag} {_c(f.severity, sev_color, color=color)}: {f.message}")
        if f.hint:
            lines.append(f"    hint: {f.hint}")
    return lines


def _summary_line(report: Report, *, color: bool) -> str:
    status = report.status
    label = _c(status.label, _STATUS_COLORS[status], color=color)
    total = len(report.findings)
    noun = "rule" if total == 1 else "rules"
    failed = len(report.failures)
    if not failed:
        return f"{label}: all {total} {noun} passed."
    parts = []
    if blocking := len(report.blocking_failures):
        parts.append(_c(f"{blocking} blocking", _SEVERITY_COLORS[Severity.BLOCKING], color=color))
    if warning := len(report.warning_failures):
        parts.append(_c(f"{warning} warning", _SEVERITY_COLORS[Severity.WARNING], color=color))
    return f"{label}: {failed} of {total} {noun} failed ({', '.join(parts)})"


def report_to_dict(report: Report, *, directory: str) -> dict[str, object]:
    return {
        "version": __version__,
        "directory": directory,
        "status": str(report.status),
        "findings": [
            {
                "rule_id": f.rule_id,
                "kind": f.kind,
                "target": f.target,
                "passed": f.passed,
                "severity": str(f.severity),
                "message": f.message,
                "hint": f.hint,
            }
            for f in report.findings
        ],
        "summary": {
            "total": len(report.findings),
            "passed": len(report.findings) - len(report.failures),
            "failed": len(report.failures),
            "blocking": len(report.blocking_failures),
            "warning": len(report.warning_failures),
        },
    }


def format_json(report: Report, *, directory: str) -> str:
    return json.dumps(report_to_dict(report, directory=directory), indent=2)


def format_rules_text(
    rules: list[Rule],
    *,
    no_color: bool = False,
    total: int | None = None,
) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    id_w = max((len(r.id) for r in rules), default=0)
    sev_w = max((len(str(r.severity)) for r in rules), default=0)

    count = len(rules)
    header = f"deploygate {__version__} - {count} rules"
    if total is not None and total != count:
        header += f" (filtered from {total})"
    w(header)
    w("")

    for r in rules:
        sev_color = _SEVERITY_COLORS.get(r.severity, "")
        rule_id = _c(r.id.ljust(id_w), _BOLD, color=color)
        severity = _c(str(r.severity).ljust(sev_w), sev_color, color=color)
        w(f"  {rule_id}  {severity}  {r.summary or r.describe()}")
        w(f"  {' ' * id_w}  {' ' * sev_w}  {_c(f'{r.kind} {r.target}', _DIM, color=color)}")

    return "\n".join(lines)


def format_rules_json(rules: list[Rule]) -> str:
    data = {
        "version": __version__,
        "rules": [
            {
                "id": r.id,
                "kind": str(r.kind),
                "target": r.target,
                "pattern": r.pattern,
                "regex": r.regex,
                "severity": str(r.severity),
                "summary": r.summary or r.describe(),
                "hint": r.hint,
            }
            for r in rules
        ],
        "total": len(rules),
    }
    return json.dumps(data, indent=2)
