import errno
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field

from deploygate.core._types import RuleKind, Severity
from deploygate.core.environment import Environment
from deploygate.core.finding import Finding, Report
from deploygate.core.rule import Rule


@dataclass
class MemoryFiles:
    """In-memory FileAccess for tests."""

    files: dict[str, str] = field(default_factory=dict)
    unreadable: frozenset[str] = frozenset()
    broken: frozenset[str] = frozenset()
    reads: int = 0
    available: bool = True

    def exists(self, path: str) -> bool:
        if path in self.broken:
            raise OSError(errno.ENAMETOOLONG, "File name too long", path)
        return path in self.files or path in self.unreadable

    def read_text(self, path: str) -> str:
        self.reads += 1
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path!r}")
        return self.files[path]

    def ensure_available(self) -> None:
        if not self.available:
            raise FileNotFoundError("storage offline")


@dataclass
class BlockingFiles(MemoryFiles):
    """MemoryFiles whose reads of ``slow`` paths hang until ``release`` is set."""

    slow: frozenset[str] = frozenset()
    release: threading.Event = field(default_factory=threading.Event)

    def read_text(self, path: str) -> str:
        if path in self.slow:
            self.release.wait(timeout=10)
        return super().read_text(path)


def make_env(
    values: Mapping[str, str] | None = None,
    files: Mapping[str, str] | None = None,
) -> Environment:
    return Environment(values=values or {}, files=MemoryFiles(dict(files or {})))


def key_rule(key: str, severity: Severity = Severity.BLOCKING, **kw: str) -> Rule:
    return Rule(f"K-{key}", RuleKind.KEY_PRESENT, key, severity, **kw)


def pattern_rule(
    rule_id: str,
    target: str,
    pattern: str,
    *,
    absent: bool = False,
    severity: Severity = Severity.BLOCKING,
    regex: bool = False,
    hint: str = "",
) -> Rule:
    kind = RuleKind.PATTERN_ABSENT_IN_FILE if absent else RuleKind.PATTERN_IN_FILE
    return Rule(rule_id, kind, target, severity, hint=hint, pattern=pattern, regex=regex)


def assert_finding(report: Report, rule_id: str, *, passed: bool) -> Finding:
    matching = [f for f in report.findings if f.rule_id == rule_id]
    assert matching, f"No finding for {rule_id}, got: {[f.rule_id for f in report.findings]}"
    finding = matching[0]
    assert finding.passed is passed, f"{rule_id}: expected passed={passed}, got {finding}"
    return finding
