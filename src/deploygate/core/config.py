from __future__ import annotations

import dataclasses
import fnmatch
import functools
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deploygate.core._types import RuleKind, Severity
from deploygate.core.rule import Rule

CONFIG_FILENAME = ".deploygate.toml"
DEFAULT_PLACEHOLDER_PREFIXES: tuple[str, ...] = ("changeme", "your_")
NO_RULESET = "none"


class ConfigurationError(ValueError):
    """Raised when the validator itself is misconfigured.

    Covers malformed rule sets, unsupported rule kinds, an unavailable
    environment and invalid config files. Never used for a rule that simply
    failed - those are reported as findings.
    """


def _is_glob(pattern: str) -> bool:
    return any(c in pattern for c in "*?[")


@dataclass(frozen=True)
class PreflightConfig:
    """Configuration for a preflight run.

    Can be loaded from ``.deploygate.toml`` or ``pyproject.toml
    [tool.deploygate]`` via :func:`load_config`.

    Example ``.deploygate.toml``::

        ruleset = "deploy"
        placeholder_prefixes = ["changeme", "your_", "todo"]
        exclude_rules = ["CMP-002"]

        [[rules]]
        id = "APP-001"
        kind = "pattern_in_file"
        target = "application.yml"
        pattern = "timezone: Europe/Luxembourg"
        severity = "warning"
        hint = "Set spring.jackson.time-zone in application.yml"

    """

    # --- Rule selection ---

    ruleset: str = "deploy"
    """Built-in base rule set name, or ``"none"`` to use only ``rules``."""

    rules: tuple[Rule, ...] = ()
    """Extra rules appended after the base rule set."""

    include_rules: frozenset[str] = field(default_factory=frozenset)
    """Allowlist: if non-empty, only rules matching these patterns are active.
    Applied before ``exclude_rules``.

    Supports both exact IDs (``"ENV-001"``) and glob patterns (``"ENV-*"``).
    """

    exclude_rules: frozenset[str] = field(default_factory=frozenset)
    """Denylist: rule IDs to suppress. Applied after ``include_rules``."""

    # --- Check behaviour ---

    placeholder_prefixes: tuple[str, ...] = DEFAULT_PLACEHOLDER_PREFIXES
    """Values starting with one of these (case-insensitive) count as unconfigured."""

    file_timeout: float = 5.0
    """Deadline in seconds for each file-based check."""

    max_workers: int = 4
    """Worker threads used for file-based checks."""

    # --- Loader ---

    env_file: str = ".env"
    """Dotenv file, relative to the working directory."""

    _exact_include: frozenset[str] = field(
        default_factory=frozenset, init=False, compare=False, hash=False, repr=False
    )
    _glob_include: tuple[re.Pattern[str], ...] = field(
        default=(), init=False, compare=False, hash=False, repr=False
    )
    _exact_exclude: frozenset[str] = field(
        default_factory=frozenset, init=False, compare=False, hash=False, repr=False
    )
    _glob_exclude: tuple[re.Pattern[str], ...] = field(
        default=(), init=False, compare=False, hash=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.file_timeout <= 0:
            msg = f"file_timeout must be positive, got {self.file_timeout!r}"
            raise ConfigurationError(msg)
        if self.max_workers < 1:
            msg = f"max_workers must be at least 1, got {self.max_workers!r}"
            raise ConfigurationError(msg)

        exact_inc = frozenset(p for p in self.include_rules if not _is_glob(p))
        glob_inc = tuple(
            re.compile(fnmatch.translate(p)) for p in self.include_rules if _is_glob(p)
        )
        exact_exc = frozenset(p for p in self.exclude_rules if not _is_glob(p))
        glob_exc = tuple(
            re.compile(fnmatch.translate(p)) for p in self.exclude_rules if _is_glob(p)
        )
        object.__setattr__(self, "_exact_include", exact_inc)
        object.__setattr__(self, "_glob_include", glob_inc)
        object.__setattr__(self, "_exact_exclude", exact_exc)
        object.__setattr__(self, "_glob_exclude", glob_exc)

    @functools.cache  # noqa: B019
    def allows(self, rule: Rule) -> bool:
        """Return ``True`` if *rule* passes the include/exclude filters."""
        if self.include_rules and (
            rule.id not in self._exact_include
            and not any(p.match(rule.id) for p in self._glob_include)
        ):
            return False

        if rule.id in self._exact_exclude:
            return False

        return not any(p.match(rule.id) for p in self._glob_exclude)

    def rule_set(self) -> list[Rule]:
        """Return the base rule set plus custom rules, filtered by :meth:`allows`.

        Raises:
            :class:`ConfigurationError`: If ``ruleset`` names no built-in set.

        """
        from deploygate.rules import BUILTIN_RULESETS

        if self.ruleset == NO_RULESET:
            base: list[Rule] = []
        else:
            try:
                base = list(BUILTIN_RULESETS[self.ruleset])
            except KeyError:
                known = ", ".join(f'"{name}"' for name in [*BUILTIN_RULESETS, NO_RULESET])
                msg = f"Unknown ruleset {self.ruleset!r}. Known rulesets: {known}"
                raise ConfigurationError(msg) from None
        return [r for r in [*base, *self.rules] if self.allows(r)]


def load_config(
    path: Path | str | None = None, *, start: Path | str | None = None
) -> PreflightConfig:
    """Load :class:`PreflightConfig` from a TOML file.

    When ``path`` is ``None``, walks up from ``start`` (default: current
    directory) looking for ``.deploygate.toml`` first, then ``pyproject.toml
    [tool.deploygate]``.  A ``pyproject.toml`` without a ``[tool.deploygate]``
    section acts as a project root marker and stops the search.

    Raises:
        :class:`ConfigurationError`: If the file is not valid TOML or contains
            an unrecognised value.

    """
    if path is not None:
        resolved = Path(path)
        if not resolved.exists():
            msg = f"Config file {str(resolved)!r} not found"
            raise ConfigurationError(msg)
        data = _read_file(resolved)
    else:
        data = _find_config(Path(start) if start is not None else Path.cwd())

    return parse_config(data)


def _find_config(start: Path) -> dict[str, Any]:
    """Walk up from *start* looking for a config file."""
    current = start.resolve()
    while True:
        own = current / CONFIG_FILENAME
        if own.exists():
            return _read_file(own)

        pyproject = current / "pyproject.toml"
        if pyproject.exists():
            return _read_file(pyproject)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return {}


def _read_file(path: Path) -> dict[str, Any]:
    """Read a TOML file and return the deploygate-relevant section."""
    try:
        with path.open("rb") as f:
            raw: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
    if path.name == "pyproject.toml":
        tool: dict[str, Any] = raw.get("tool", {})
        section: dict[str, Any] = tool.get("deploygate", {})
        return section
    return raw


def parse_config(data: dict[str, Any]) -> PreflightConfig:
    """Parse a raw key/value dict into :class:`PreflightConfig`.

    Raises:
        :class:`ConfigurationError`: On invalid values or malformed rules.

    """
    kwargs: dict[str, Any] = {}
    try:
        if (v := data.get("ruleset")) is not None:
            kwargs["ruleset"] = str(v)
        if (v := data.get("env_file")) is not None:
            kwargs["env_file"] = str(v)
        if (v := data.get("file_timeout")) is not None:
            kwargs["file_timeout"] = float(v)
        if (v := data.get("max_workers")) is not None:
            kwargs["max_workers"] = int(v)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(str(exc)) from exc

    if isinstance(prefixes := data.get("placeholder_prefixes"), list):
        kwargs["placeholder_prefixes"] = tuple(str(p) for p in prefixes)
    if isinstance(ids := data.get("include_rules"), list):
        kwargs["include_rules"] = frozenset(str(r) for r in ids)
    if isinstance(ids := data.get("exclude_rules"), list):
        kwargs["exclude_rules"] = frozenset(str(r) for r in ids)
    if (entries := data.get("rules")) is not None:
        kwargs["rules"] = tuple(parse_rules(entries))

    config = dataclasses.replace(PreflightConfig(), **kwargs)
    # Fail on an unknown ruleset name at load time, not at first use.
    config.rule_set()
    return config


_RULE_KEYS = frozenset({"id", "kind", "target", "severity", "hint", "pattern", "summary", "regex"})


def parse_rules(entries: Any) -> list[Rule]:
    """Build :class:`Rule` objects from a list of TOML tables."""
    if not isinstance(entries, list):
        msg = f"'rules' must be a list of tables, got {type(entries).__name__}"
        raise ConfigurationError(msg)

    rules: list[Rule] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            msg = f"rules[{index}] must be a table, got {type(entry).__name__}"
            raise ConfigurationError(msg)
        if unknown := sorted(set(entry) - _RULE_KEYS):
            msg = f"rules[{index}] has unknown keys: {', '.join(unknown)}"
            raise ConfigurationError(msg)
        for required in ("id", "kind", "target"):
            if not entry.get(required):
                msg = f"rules[{index}] is missing {required!r}"
                raise ConfigurationError(msg)

        try:
            kind = RuleKind(entry["kind"])
        except ValueError:
            known = ", ".join(RuleKind)
            msg = f"rules[{index}] has unsupported kind {entry['kind']!r}. Known kinds: {known}"
            raise ConfigurationError(msg) from None
        try:
            severity = Severity(entry.get("severity", Severity.BLOCKING))
        except ValueError:
            msg = f"rules[{index}] has unknown severity {entry['severity']!r}"
            raise ConfigurationError(msg) from None

        rules.append(
            Rule(
                id=str(entry["id"]),
                kind=kind,
                target=str(entry["target"]),
                severity=severity,
                hint=str(entry.get("hint", "")),
                pattern=str(entry.get("pattern", "")),
                summary=str(entry.get("summary", "")),
                regex=bool(entry.get("regex", False)),
            )
        )
    return rules
