"""Checks against files under the working directory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from deploygate.checks._helpers import content_matches, read_failure
from deploygate.checks.base import BaseCheck, CheckOutcome
from deploygate.core._types import RuleKind

if TYPE_CHECKING:
    from deploygate.core.config import PreflightConfig
    from deploygate.core.environment import Environment
    from deploygate.core.rule import Rule

logger = logging.getLogger("deploygate")


class FileExistsCheck(BaseCheck):
    kind = RuleKind.FILE_EXISTS
    reads_files = True

    def evaluate(self, rule: Rule, env: Environment, config: PreflightConfig) -> CheckOutcome:
        try:
            found = env.files.exists(rule.target)
        except OSError as exc:
            logger.warning("Could not stat %s: %s", rule.target, exc)
            return CheckOutcome(False, read_failure(rule, exc))
        if found:
            return CheckOutcome(True, f"{rule.target} found")
        return CheckOutcome(False, f"{rule.target} not found")


class PatternInFileCheck(BaseCheck):
    kind = RuleKind.PATTERN_IN_FILE
    reads_files = True

    def evaluate(self, rule: Rule, env: Environment, config: PreflightConfig) -> CheckOutcome:
        try:
            if not env.files.exists(rule.target):
                return CheckOutcome(False, f"{rule.target} not found")
            content = env.files.read_text(rule.target)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", rule.target, exc)
            return CheckOutcome(False, read_failure(rule, exc))
        if content_matches(rule, content):
            return CheckOutcome(True, f"{rule.target} contains {rule.pattern!r}")
        return CheckOutcome(False, f"{rule.target} does not contain {rule.pattern!r}")


class PatternAbsentInFileCheck(BaseCheck):
    kind = RuleKind.PATTERN_ABSENT_IN_FILE
    reads_files = True

    def evaluate(self, rule: Rule, env: Environment, config: PreflightConfig) -> CheckOutcome:
        try:
            # A missing file cannot contain the pattern.
            if not env.files.exists(rule.target):
                return CheckOutcome(True, f"{rule.target} not found, nothing to flag")
            content = env.files.read_text(rule.target)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", rule.target, exc)
            return CheckOutcome(False, read_failure(rule, exc))
        if content_matches(rule, content):
            return CheckOutcome(False, f"{rule.target} contains {rule.pattern!r}")
        return CheckOutcome(True, f"{rule.target} does not contain {rule.pattern!r}")
