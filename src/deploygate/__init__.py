from importlib.metadata import version

from deploygate.core._types import RuleKind, Severity, Status
from deploygate.core.config import ConfigurationError, PreflightConfig, load_config
from deploygate.core.environment import DirectoryFiles, Environment, FileAccess
from deploygate.core.finding import Finding, PreflightBlockedError, Report
from deploygate.core.rule import Rule, RuleSet
from deploygate.core.validator import validate

__version__ = version("deploygate")


__all__ = [
    "ConfigurationError",
    "DirectoryFiles",
    "Environment",
    "FileAccess",
    "Finding",
    "PreflightBlockedError",
    "PreflightConfig",
    "Report",
    "Rule",
    "RuleKind",
    "RuleSet",
    "Severity",
    "Status",
    "__version__",
    "load_config",
    "validate",
]
