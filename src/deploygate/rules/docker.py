from deploygate.core._types import RuleKind, Severity
from deploygate.core.rule import Rule

_DOCKERFILE = "Dockerfile"

FILE_003 = Rule(
    "FILE-003",
    RuleKind.FILE_EXISTS,
    ".env",
    Severity.WARNING,
    hint="Copy .env.template to .env and set passwords before starting containers",
    summary="Environment file present",
)
FILE_004 = Rule(
    "FILE-004",
    RuleKind.FILE_EXISTS,
    _DOCKERFILE,
    Severity.BLOCKING,
    hint="Add a Dockerfile for the application image",
    summary="Dockerfile must exist",
)
DKR_001 = Rule(
    "DKR-001",
    RuleKind.PATTERN_ABSENT_IN_FILE,
    _DOCKERFILE,
    Severity.WARNING,
    pattern="COPY frontend/",
    hint="The multi-stage Dockerfile expects a frontend/ directory; "
    "use the single-stage JAR Dockerfile if there is none",
    summary="Dockerfile does not copy frontend/",
)
DKR_002 = Rule(
    "DKR-002",
    RuleKind.PATTERN_ABSENT_IN_FILE,
    _DOCKERFILE,
    Severity.WARNING,
    pattern="COPY backend/",
    hint="The Dockerfile expects a backend/ directory; "
    "use the single-stage JAR Dockerfile if there is none",
    summary="Dockerfile does not copy backend/",
)
