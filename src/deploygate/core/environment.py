from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Protocol


class FileAccess(Protocol):
    """Read-only file capability scoped to a working directory.

    Paths are always relative to that directory.
    """

    def exists(self, path: str) -> bool: ...

    def read_text(self, path: str) -> str: ...

    def ensure_available(self) -> None:
        """Raise :class:`OSError` if the underlying storage cannot be used."""


def is_contained(path: str) -> bool:
    """Return ``True`` if *path* is relative and does not climb out via ``..``."""
    if not path:
        return False
    p = PurePosixPath(path.replace("\\", "/"))
    return not p.is_absolute() and ".." not in p.parts


@dataclass(frozen=True)
class DirectoryFiles:
    """:class:`FileAccess` backed by a real directory."""

    root: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))

    def _resolve(self, path: str) -> Path:
        if not is_contained(path):
            msg = f"{path!r} is outside the working directory"
            raise ValueError(msg)
        return self.root / path

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def ensure_available(self) -> None:
        if not self.root.is_dir():
            msg = f"Working directory {str(self.root)!r} does not exist or is not a directory"
            raise NotADirectoryError(msg)


@dataclass(frozen=True)
class Environment:
    """Read-only view handed to the validator.

    ``files`` is the file capability for the working directory and must be
    given explicitly; use :meth:`from_directory` for a real directory.
    ``values`` holds configuration entries (e.g. parsed from ``.env``) and is
    frozen into a :class:`types.MappingProxyType` on construction, so checks
    cannot write to it.
    """

    files: FileAccess
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def from_directory(
        cls, root: Path | str, values: Mapping[str, str] | None = None
    ) -> Environment:
        return cls(values=values or {}, files=DirectoryFiles(Path(root)))
