import pytest

from deploygate.core._types import RuleKind, Severity, Status
from deploygate.core.rule import Rule
from deploygate.core.validator import validate
from deploygate.rules import ALL_RULES, BUILTIN_RULESETS, RULES, _collect_rules
from tests.conftest import assert_finding, make_env

_SECRETS = {
    "DB_PASSWORD": "s3cr3t-val",
    "JWT_SECRET": "a-very-long-jwt-secret-0123456789",
    "ENCRYPTION_KEY": "a-very-long-encryption-key-012345",
}
_COMPOSE_OK = """\
services:
  app:
    environment:
      - AUDIT_LOG_ENABLED=true
      - DATA_RETENTION_DAYS=2555
      - TZ=Europe/Luxembourg
"""


class TestCatalog:
    def test_ids_unique_and_sorted(self) -> None:
        ids = [r.id for r in ALL_RULES]
        assert ids == sorted(set(ids))
        assert set(RULES) == set(ids)

    def test_builtin_rulesets_use_catalog_rules(self) -> None:
        for rules in BUILTIN_RULESETS.values():
            for rule in rules:
                assert RULES[rule.id] is rule

    def test_every_rule_has_hint_and_summary(self) -> None:
        for rule in ALL_RULES:
            assert rule.hint, rule.id
            assert rule.summary, rule.id

    def test_collect_rejects_duplicates(self) -> None:
        class _Module:
            A = Rule("DUP-1", RuleKind.KEY_PRESENT, "A")
            B = Rule("DUP-1", RuleKind.KEY_PRESENT, "B")

        with pytest.raises(ValueError, match="Duplicate rule ID: DUP-1"):
            _collect_rules(_Module)

    def test_rule_str(self) -> None:
        assert str(RULES["CMP-001"]) == "[CMP-001] Audit logging enabled"
        bare = Rule("X-1", RuleKind.PATTERN_ABSENT_IN_FILE, "Dockerfile", pattern="COPY x")
        assert str(bare) == "[X-1] Dockerfile must not contain 'COPY x'"


class TestDeployRuleset:
    def test_configured_project_passes(self) -> None:
        env = make_env(_SECRETS, {".env": "", "docker-compose.yml": _COMPOSE_OK})
        report = validate(BUILTIN_RULESETS["deploy"], env)
        assert report.status == Status.PASS

    def test_missing_audit_logging_blocks(self) -> None:
        compose = _COMPOSE_OK.replace("AUDIT_LOG_ENABLED=true", "AUDIT_LOG_ENABLED=false")
        env = make_env(_SECRETS, {".env": "", "docker-compose.yml": compose})
        report = validate(BUILTIN_RULESETS["deploy"], env)
        assert report.status == Status.BLOCKED
        assert [f.rule_id for f in report.failures] == ["CMP-001"]

    def test_retention_and_timezone_only_warn(self) -> None:
        env = make_env(
            _SECRETS, {".env": "", "docker-compose.yml": "  - AUDIT_LOG_ENABLED=true\n"}
        )
        report = validate(BUILTIN_RULESETS["deploy"], env)
        assert report.status == Status.PASS_WITH_WARNINGS
        assert [f.rule_id for f in report.warning_failures] == ["CMP-002", "CMP-003"]

    def test_fresh_setup_reports_every_problem(self) -> None:
        values = {
            "DB_PASSWORD": "changeme_secure_password",
            "JWT_SECRET": "changeme_jwt_secret_minimum_32_characters_long",
            "ENCRYPTION_KEY": "",
        }
        report = validate(BUILTIN_RULESETS["deploy"], make_env(values, {".env": ""}))
        assert [f.rule_id for f in report.failures] == [
            "ENV-001",
            "ENV-002",
            "ENV-003",
            "FILE-002",
            "CMP-001",
            "CMP-002",
            "CMP-003",
        ]
        assert report.status == Status.BLOCKED


class TestDiagnoseRuleset:
    def test_multistage_dockerfile_warns(self) -> None:
        files = {
            ".env": "",
            "docker-compose.yml": "",
            "Dockerfile": "COPY frontend/package*.json ./\nCOPY src/ ./src/\n",
        }
        report = validate(BUILTIN_RULESETS["diagnose"], make_env(_SECRETS, files))
        assert_finding(report, "DKR-001", passed=False)
        assert_finding(report, "DKR-002", passed=True)
        assert report.status == Status.PASS_WITH_WARNINGS

    def test_missing_env_file_is_a_warning(self) -> None:
        files = {"docker-compose.yml": "", "Dockerfile": "COPY app.jar app.jar\n"}
        report = validate(BUILTIN_RULESETS["diagnose"], make_env(_SECRETS, files))
        finding = assert_finding(report, "FILE-003", passed=False)
        assert finding.severity == Severity.WARNING
        assert report.status == Status.PASS_WITH_WARNINGS
