from deploygate.core.rule import Rule
from deploygate.rules import compliance, docker, secrets
from deploygate.rules.compliance import CMP_001, CMP_002, CMP_003, FILE_001, FILE_002
from deploygate.rules.docker import DKR_001, DKR_002, FILE_003, FILE_004
from deploygate.rules.secrets import ENV_001, ENV_002, ENV_003


def _collect_rules(*modules: object) -> dict[str, Rule]:
    """Collect all Rule instances from the given modules."""
    rules: dict[str, Rule] = {}
    for module in modules:
        for name in dir(module):
            obj = getattr(module, name)
            if isinstance(obj, Rule):
                if obj.id in rules:
                    msg = f"Duplicate rule ID: {obj.id}"
                    raise ValueError(msg)
                rules[obj.id] = obj
    return rules


RULES: dict[str, Rule] = _collect_rules(secrets, compliance, docker)
ALL_RULES: list[Rule] = sorted(RULES.values(), key=lambda r: r.id)

# Ordered the way the deploy and diagnose workflows run their checks.
BUILTIN_RULESETS: dict[str, tuple[Rule, ...]] = {
    "deploy": (
        FILE_001,
        ENV_001,
        ENV_002,
        ENV_003,
        FILE_002,
        CMP_001,
        CMP_002,
        CMP_003,
    ),
    "diagnose": (
        FILE_002,
        FILE_003,
        ENV_001,
        ENV_002,
        ENV_003,
        FILE_004,
        DKR_001,
        DKR_002,
    ),
}

__all__ = ["ALL_RULES", "BUILTIN_RULESETS", "RULES"]
