"""Base check interface and registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from deploygate.core._types import RuleKind
    from deploygate.core.config import PreflightConfig
    from deploygate.core.environment import Environment
    from deploygate.core.rule import Rule


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    passed: bool
    detail: str


class BaseCheck:
    """Base class for all rule checks.

    Each subclass handles exactly one :class:`RuleKind`. ``evaluate`` must
    only read from the environment, never write to it.
    """

    kind: ClassVar[RuleKind]
    reads_files: ClassVar[bool] = False
    """File-reading checks run on the worker pool under a deadline."""

    def evaluate(self, rule: Rule, env: Environment, config: PreflightConfig) -> CheckOutcome:
        raise NotImplementedError


class CheckRegistry:
    """Registry of checks keyed by rule kind."""

    def __init__(self) -> None:
        self._checks: dict[str, BaseCheck] = {}

    def register(self, check: BaseCheck) -> None:
        """Register *check* for its kind, replacing any previous one."""
        self._checks[check.kind] = check

    def get(self, kind: str) -> BaseCheck | None:
        return self._checks.get(kind)

    def __getitem__(self, kind: str) -> BaseCheck:
        return self._checks[kind]

    def __contains__(self, kind: object) -> bool:
        return kind in self._checks

    @property
    def kinds(self) -> list[str]:
        return list(self._checks)


def create_default_registry() -> CheckRegistry:
    """Create a registry with all built-in checks."""
    from deploygate.checks.files import (
        FileExistsCheck,
        PatternAbsentInFileCheck,
        PatternInFileCheck,
    )
    from deploygate.checks.keys import KeyPresentCheck

    registry = CheckRegistry()
    registry.register(KeyPresentCheck())
    registry.register(FileExistsCheck())
    registry.register(PatternInFileCheck())
    registry.register(PatternAbsentInFileCheck())
    return registry
