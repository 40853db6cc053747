import os
from pathlib import Path

from dotenv import dotenv_values

from deploygate.core.config import ConfigurationError
from deploygate.core.environment import Environment


def read_env_file(path: Path) -> dict[str, str]:
    """Parse a dotenv file into a plain dict.

    Keys written without ``=`` come back from python-dotenv as ``None``; they
    are dropped so they count as absent, not empty. A missing file yields
    an empty dict.

    Raises:
        :class:`ConfigurationError`: If the file cannot be read or is not
            valid UTF-8.

    """
    if not path.is_file():
        return {}
    try:
        parsed = dotenv_values(path)
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Could not read {path}: {exc}"
        raise ConfigurationError(msg) from exc
    return {k: v for k, v in parsed.items() if v is not None}


def load_environment(
    directory: Path | str,
    *,
    env_file: str = ".env",
    use_os_environ: bool = False,
) -> Environment:
    """Build an :class:`Environment` rooted at *directory*.

    Values come from *env_file* (relative to *directory*). With
    *use_os_environ* the process environment is layered underneath, so the
    file wins on conflicts.
    """
    root = Path(directory)
    values: dict[str, str] = dict(os.environ) if use_os_environ else {}
    values.update(read_env_file(root / env_file))
    return Environment.from_directory(root, values)
