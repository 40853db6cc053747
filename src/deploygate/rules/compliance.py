from deploygate.core._types import RuleKind, Severity
from deploygate.core.rule import Rule

_COMPOSE = "docker-compose.yml"

FILE_001 = Rule(
    "FILE-001",
    RuleKind.FILE_EXISTS,
    ".env",
    Severity.BLOCKING,
    hint="Copy .env.template to .env and configure it",
    summary="Environment file must exist",
)
FILE_002 = Rule(
    "FILE-002",
    RuleKind.FILE_EXISTS,
    _COMPOSE,
    Severity.BLOCKING,
    hint="Run from the project directory that holds docker-compose.yml",
    summary="Compose file must exist",
)
CMP_001 = Rule(
    "CMP-001",
    RuleKind.PATTERN_IN_FILE,
    _COMPOSE,
    Severity.BLOCKING,
    pattern="AUDIT_LOG_ENABLED=true",
    hint="Audit logging must be enabled: add AUDIT_LOG_ENABLED=true to the app environment",
    summary="Audit logging enabled",
)
CMP_002 = Rule(
    "CMP-002",
    RuleKind.PATTERN_IN_FILE,
    _COMPOSE,
    Severity.WARNING,
    pattern="DATA_RETENTION_DAYS=2555",
    hint="Set DATA_RETENTION_DAYS=2555 to keep records for the 7-year retention period",
    summary="Data retention set to 7 years",
)
CMP_003 = Rule(
    "CMP-003",
    RuleKind.PATTERN_IN_FILE,
    _COMPOSE,
    Severity.WARNING,
    pattern="TZ=Europe/Luxembourg",
    hint="Set TZ=Europe/Luxembourg in the app environment",
    summary="Luxembourg timezone configured",
)
