from dataclasses import dataclass

from deploygate.core._types import Severity, Status


@dataclass(frozen=True, slots=True)
class Finding:
    """The outcome of evaluating one rule."""

    rule_id: str
    passed: bool
    severity: Severity
    message: str
    hint: str = ""
    kind: str = ""
    target: str = ""


@dataclass(frozen=True, slots=True)
class Report:
    """All findings of one validation run, in rule-set order.

    ``status`` is derived from ``findings`` on every access, so two reports
    with equal findings always agree on their status.
    """

    findings: tuple[Finding, ...] = ()

    @property
    def status(self) -> Status:
        if self.blocking_failures:
            return Status.BLOCKED
        if self.warning_failures:
            return Status.PASS_WITH_WARNINGS
        return Status.PASS

    @property
    def failures(self) -> list[Finding]:
        return [f for f in self.findings if not f.passed]

    @property
    def blocking_failures(self) -> list[Finding]:
        return [f for f in self.failures if f.severity == Severity.BLOCKING]

    @property
    def warning_failures(self) -> list[Finding]:
        return [f for f in self.failures if f.severity == Severity.WARNING]

    @property
    def passed(self) -> bool:
        """``True`` unless the report is blocked."""
        return self.status != Status.BLOCKED

    def raise_for_status(self) -> None:
        """Raise :class:`PreflightBlockedError` if the report is blocked."""
        if self.status == Status.BLOCKED:
            raise PreflightBlockedError(self)


class PreflightBlockedError(Exception):
    """Raised by :meth:`Report.raise_for_status` when a blocking rule failed."""

    def __init__(self, report: Report) -> None:
        self.report = report
        blocking = len(report.blocking_failures)
        noun = "rule" if blocking == 1 else "rules"
        super().__init__(
            f"Preflight blocked: {blocking} blocking {noun} failed "
            f"out of {len(report.findings)} checked"
        )
