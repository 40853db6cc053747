"""key_present: configuration entries that must hold a real value."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

from deploygate.checks.base import BaseCheck, CheckOutcome
from deploygate.core._types import RuleKind

if TYPE_CHECKING:
    from deploygate.core.config import PreflightConfig
    from deploygate.core.environment import Environment
    from deploygate.core.rule import Rule


class Unconfigured(StrEnum):
    """Why a configuration value does not count as set."""

    ABSENT = "absent"
    EMPTY = "empty"
    PLACEHOLDER = "placeholder"


def unconfigured_reason(value: str | None, prefixes: Iterable[str]) -> Unconfigured | None:
    """Return why *value* is unconfigured, or ``None`` if it holds a real value.

    Whitespace-only values count as empty. Placeholder prefixes are compared
    case-insensitively, so ``"ChangeMe123"`` matches ``"changeme"``.
    """
    if value is None:
        return Unconfigured.ABSENT
    if not value.strip():
        return Unconfigured.EMPTY
    folded = value.strip().casefold()
    if any(prefix and folded.startswith(prefix.casefold()) for prefix in prefixes):
        return Unconfigured.PLACEHOLDER
    return None


_MESSAGES: dict[Unconfigured, str] = {
    Unconfigured.ABSENT: "{key} is not set",
    Unconfigured.EMPTY: "{key} is empty",
    Unconfigured.PLACEHOLDER: "{key} still has a placeholder value",
}


class KeyPresentCheck(BaseCheck):
    kind = RuleKind.KEY_PRESENT

    def evaluate(self, rule: Rule, env: Environment, config: PreflightConfig) -> CheckOutcome:
        reason = unconfigured_reason(env.values.get(rule.target), config.placeholder_prefixes)
        if reason is None:
            return CheckOutcome(True, f"{rule.target} is configured")
        return CheckOutcome(False, _MESSAGES[reason].format(key=rule.target))
