import logging
import re
import threading
import time

from deploygate.checks.base import BaseCheck, CheckOutcome, CheckRegistry, create_default_registry
from deploygate.core._types import FILE_KINDS, PATTERN_KINDS, RuleKind, Severity
from deploygate.core.config import ConfigurationError, PreflightConfig
from deploygate.core.environment import Environment, is_contained
from deploygate.core.finding import Finding, Report
from deploygate.core.rule import Rule, RuleSet

logger = logging.getLogger("deploygate")


def validate(
    rule_set: RuleSet,
    environment: Environment,
    *,
    config: PreflightConfig | None = None,
    registry: CheckRegistry | None = None,
) -> Report:
    """Evaluate every rule in *rule_set* against *environment*.

    Every rule is evaluated, even after failures, and the report holds one
    finding per rule in rule-set order. Rules that fail are findings, never
    exceptions.

    Args:
        rule_set: Non-empty ordered sequence of rules.
        environment: Read-only view of configuration values and files.
        config: Placeholder prefixes, file timeout and worker count.
                Defaults to ``PreflightConfig()``.
        registry: Custom check registry. Uses built-in checks if None.

    Returns:
        A fresh :class:`Report`.

    Raises:
        :class:`ConfigurationError`: If the rule set is malformed or the
            environment cannot be used.

    Example::

        from deploygate import Environment, validate
        from deploygate.rules import BUILTIN_RULESETS

        report = validate(BUILTIN_RULESETS["deploy"], Environment.from_directory("."))
        report.raise_for_status()

    """
    _config = config or PreflightConfig()
    if registry is None:
        registry = create_default_registry()

    rules = list(rule_set)
    _check_rule_set(rules, registry)

    try:
        environment.files.ensure_available()
    except OSError as exc:
        raise ConfigurationError(f"Environment unavailable: {exc}") from exc

    slots: list[Finding | None] = [None] * len(rules)
    pending: list[tuple[int, Rule, BaseCheck]] = []

    for index, rule in enumerate(rules):
        check = registry[rule.kind]
        if check.reads_files:
            pending.append((index, rule, check))
        else:
            slots[index] = _finding(rule, _evaluate(rule, check, environment, _config))

    if pending:
        _evaluate_on_threads(pending, slots, environment, _config)

    findings = tuple(f for f in slots if f is not None)
    report = Report(findings=findings)

    for f in findings:
        logger.debug(
            "[%s] %s %s: %s",
            f.rule_id,
            "pass" if f.passed else "FAIL",
            f.severity,
            f.message,
        )
    logger.info(
        "Preflight %s: %d rules, %d failed",
        report.status.label,
        len(findings),
        len(report.failures),
    )
    return report


def _evaluate_on_threads(
    pending: list[tuple[int, Rule, BaseCheck]],
    slots: list[Finding | None],
    environment: Environment,
    config: PreflightConfig,
) -> None:
    """Run file checks on daemon threads and store findings by rule index.

    At most ``config.max_workers`` checks run at once. A thread still alive at
    its deadline is abandoned; being a daemon, it cannot keep the process up.
    """
    gate = threading.BoundedSemaphore(config.max_workers)
    outcomes: dict[int, CheckOutcome] = {}

    def _runner(index: int, rule: Rule, check: BaseCheck) -> None:
        with gate:
            outcomes[index] = _evaluate(rule, check, environment, config)

    started: list[tuple[int, Rule, threading.Thread, float]] = []
    for index, rule, check in pending:
        thread = threading.Thread(
            target=_runner,
            args=(index, rule, check),
            daemon=True,
            name=f"deploygate-{rule.id}",
        )
        thread.start()
        started.append((index, rule, thread, time.monotonic() + config.file_timeout))

    for index, rule, thread, deadline in started:
        thread.join(timeout=max(0.0, deadline - time.monotonic()))
        if thread.is_alive():
            logger.warning(
                "Check %s on %s timed out after %.1fs",
                rule.id,
                rule.target,
                config.file_timeout,
            )
            outcome = CheckOutcome(
                False, f"{rule.target}: check timed out after {config.file_timeout:g}s"
            )
        else:
            outcome = outcomes[index]
        slots[index] = _finding(rule, outcome)


def _evaluate(
    rule: Rule, check: BaseCheck, environment: Environment, config: PreflightConfig
) -> CheckOutcome:
    """Run one check, turning an unexpected exception into a failed outcome."""
    try:
        return check.evaluate(rule, environment, config)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Check %s on %s raised %r", rule.id, rule.target, exc)
        return CheckOutcome(False, f"{rule.target}: check failed: {exc}")


def _finding(rule: Rule, outcome: CheckOutcome) -> Finding:
    return Finding(
        rule_id=rule.id,
        passed=outcome.passed,
        severity=Severity(rule.severity),
        message=outcome.detail,
        hint="" if outcome.passed else rule.hint,
        kind=str(rule.kind),
        target=rule.target,
    )


def _check_rule_set(rules: list[Rule], registry: CheckRegistry) -> None:
    """Reject a malformed rule set before anything is evaluated."""
    if not rules:
        raise ConfigurationError("Rule set is empty")

    seen: set[str] = set()
    for position, rule in enumerate(rules):
        if not isinstance(rule, Rule):
            msg = f"Rule set entry {position} is not a Rule (got {type(rule).__name__})"
            raise ConfigurationError(msg)
        label = rule.id or f"#{position}"
        if not rule.id:
            raise ConfigurationError(f"Rule {label} has no id")
        if rule.id in seen:
            raise ConfigurationError(f"Duplicate rule ID: {rule.id}")
        seen.add(rule.id)

        if rule.kind not in registry:
            known = ", ".join(registry.kinds)
            msg = f"Rule {label} has unsupported kind {rule.kind!r}. Known kinds: {known}"
            raise ConfigurationError(msg)
        if rule.severity not in set(Severity):
            raise ConfigurationError(f"Rule {label} has unknown severity {rule.severity!r}")
        if not rule.target:
            raise ConfigurationError(f"Rule {label} has no target")

        if rule.kind in FILE_KINDS and not is_contained(rule.target):
            msg = f"Rule {label} targets {rule.target!r}, which is outside the working directory"
            raise ConfigurationError(msg)
        if rule.kind in PATTERN_KINDS:
            if not rule.pattern:
                raise ConfigurationError(f"Rule {label} ({rule.kind}) needs a pattern")
            if rule.regex:
                try:
                    re.compile(rule.pattern)
                except re.error as exc:
                    msg = f"Rule {label} has an invalid regex {rule.pattern!r}: {exc}"
                    raise ConfigurationError(msg) from exc
        elif rule.kind == RuleKind.KEY_PRESENT and rule.pattern:
            raise ConfigurationError(f"Rule {label} ({rule.kind}) does not take a pattern")
