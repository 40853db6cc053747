import re

from deploygate.core.rule import Rule


def content_matches(rule: Rule, content: str) -> bool:
    """Return ``True`` if *content* contains the rule's pattern.

    Plain patterns are substring matches. With ``rule.regex`` the pattern is
    searched line by line, the way ``grep -q`` does.
    """
    if not rule.regex:
        return rule.pattern in content
    compiled = re.compile(rule.pattern)
    return any(compiled.search(line) for line in content.splitlines())


def read_failure(rule: Rule, exc: Exception) -> str:
    return f"{rule.target} could not be read: {exc}"
