from enum import StrEnum


class Severity(StrEnum):
    """Rule severity levels."""

    WARNING = "warning"
    BLOCKING = "blocking"


class RuleKind(StrEnum):
    """Supported rule kinds."""

    KEY_PRESENT = "key_present"
    FILE_EXISTS = "file_exists"
    PATTERN_IN_FILE = "pattern_in_file"
    PATTERN_ABSENT_IN_FILE = "pattern_absent_in_file"


PATTERN_KINDS = frozenset({RuleKind.PATTERN_IN_FILE, RuleKind.PATTERN_ABSENT_IN_FILE})
FILE_KINDS = frozenset({RuleKind.FILE_EXISTS, *PATTERN_KINDS})


class Status(StrEnum):
    """Overall outcome of one validation run."""

    PASS = "pass"
    PASS_WITH_WARNINGS = "pass-with-warnings"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return self.value.upper()
