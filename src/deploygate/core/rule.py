from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias

from deploygate.core._types import RuleKind, Severity


@dataclass(frozen=True, slots=True)
class Rule:
    """A single declarative preflight check.

    Rule instances are pure data - they describe *what* to check, not *how*.
    Checks in :mod:`deploygate.checks` are looked up by ``kind``.

    Example::

        CMP_001 = Rule(
            id="CMP-001",
            kind=RuleKind.PATTERN_IN_FILE,
            target="docker-compose.yml",
            pattern="AUDIT_LOG_ENABLED=true",
            severity=Severity.BLOCKING,
            hint="Set AUDIT_LOG_ENABLED=true in the app service environment",
        )
    """

    id: str
    kind: RuleKind
    target: str
    severity: Severity = Severity.BLOCKING
    hint: str = ""
    pattern: str = ""
    summary: str = ""
    regex: bool = False

    def __str__(self) -> str:
        return f"[{self.id}] {self.summary or self.describe()}"

    def describe(self) -> str:
        """Short generated description, used when ``summary`` is empty."""
        match self.kind:
            case RuleKind.KEY_PRESENT:
                return f"{self.target} must be configured"
            case RuleKind.FILE_EXISTS:
                return f"{self.target} must exist"
            case RuleKind.PATTERN_IN_FILE:
                return f"{self.target} must contain {self.pattern!r}"
            case RuleKind.PATTERN_ABSENT_IN_FILE:
                return f"{self.target} must not contain {self.pattern!r}"
        return f"{self.kind} {self.target}"


RuleSet: TypeAlias = Sequence[Rule]
