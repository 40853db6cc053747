from pathlib import Path

import pytest

from deploygate.cli._loader import load_environment, read_env_file
from deploygate.core.config import ConfigurationError
from deploygate.core.environment import DirectoryFiles, is_contained


class TestReadEnvFile:
    def test_parses_values(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text(
            "# secrets\n"
            "DB_PASSWORD=s3cr3t-val\n"
            'JWT_SECRET="quoted value"\n'
            "ENCRYPTION_KEY=\n"
            "export TZ=Europe/Luxembourg\n"
        )
        values = read_env_file(path)
        assert values == {
            "DB_PASSWORD": "s3cr3t-val",
            "JWT_SECRET": "quoted value",
            "ENCRYPTION_KEY": "",
            "TZ": "Europe/Luxembourg",
        }

    def test_key_without_equals_is_absent(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("DB_PASSWORD\nJWT_SECRET=x\n")
        assert read_env_file(path) == {"JWT_SECRET": "x"}

    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_env_file(tmp_path / ".env") == {}

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(ConfigurationError, match="Could not read"):
            read_env_file(path)


class TestLoadEnvironment:
    def test_reads_env_file(self, tmp_path: Path) -> None:
        (tmp_path / "deploy.env").write_text("A=1\n")
        env = load_environment(tmp_path, env_file="deploy.env")
        assert dict(env.values) == {"A": "1"}
        assert isinstance(env.files, DirectoryFiles)

    def test_os_environ_layered_under_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEPLOYGATE_TEST_A", "from-os")
        monkeypatch.setenv("DEPLOYGATE_TEST_B", "from-os")
        (tmp_path / ".env").write_text("DEPLOYGATE_TEST_B=from-file\n")
        env = load_environment(tmp_path, use_os_environ=True)
        assert env.values["DEPLOYGATE_TEST_A"] == "from-os"
        assert env.values["DEPLOYGATE_TEST_B"] == "from-file"

    def test_os_environ_ignored_by_default(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEPLOYGATE_TEST_A", "from-os")
        env = load_environment(tmp_path)
        assert "DEPLOYGATE_TEST_A" not in env.values


class TestDirectoryFiles:
    def test_exists_and_read(self, tmp_path: Path) -> None:
        (tmp_path / "conf").mkdir()
        (tmp_path / "conf" / "app.yml").write_text("tz: utc\n", encoding="utf-8")
        files = DirectoryFiles(tmp_path)
        assert files.exists("conf/app.yml")
        assert not files.exists("conf/missing.yml")
        assert files.read_text("conf/app.yml") == "tz: utc\n"

    def test_rejects_escaping_paths(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="outside the working directory"):
            DirectoryFiles(tmp_path).exists("../etc/passwd")

    def test_ensure_available(self, tmp_path: Path) -> None:
        DirectoryFiles(tmp_path).ensure_available()
        with pytest.raises(NotADirectoryError):
            DirectoryFiles(tmp_path / "missing").ensure_available()


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("docker-compose.yml", True),
        ("conf/app.yml", True),
        ("./Dockerfile", True),
        ("", False),
        ("/etc/passwd", False),
        ("../x", False),
        ("a/../../x", False),
        ("..\\x", False),
    ],
)
def test_is_contained(path: str, expected: bool) -> None:
    assert is_contained(path) is expected
