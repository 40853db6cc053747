from deploygate.core._types import RuleKind, Severity
from deploygate.core.rule import Rule

_HINT = "Set {key} in .env to a real value (see .env.template)"

ENV_001 = Rule(
    "ENV-001",
    RuleKind.KEY_PRESENT,
    "DB_PASSWORD",
    Severity.BLOCKING,
    hint=_HINT.format(key="DB_PASSWORD"),
    summary="Database password must be configured",
)
ENV_002 = Rule(
    "ENV-002",
    RuleKind.KEY_PRESENT,
    "JWT_SECRET",
    Severity.BLOCKING,
    hint="Set JWT_SECRET in .env to a random string of at least 32 characters",
    summary="JWT signing secret must be configured",
)
ENV_003 = Rule(
    "ENV-003",
    RuleKind.KEY_PRESENT,
    "ENCRYPTION_KEY",
    Severity.BLOCKING,
    hint="Set ENCRYPTION_KEY in .env to a random string of at least 32 characters",
    summary="Data encryption key must be configured",
)
