"""Helper utilities for constructing temporary repositories in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path, PurePosixPath
from typing import Dict, List, Mapping

from apicheck.git.diff import ChangeMode, FileChange


class FakeRepository:
    """In-memory stand-in for GitRepository serving base revision content."""

    def __init__(self, path: Path, base: Mapping[str, str], changes: List[FileChange]) -> None:
        self.path = path
        self._base = dict(base)
        self._changes = list(changes)
        self.shown: List[str] = []

    def changed_files(self, ref: str) -> List[FileChange]:
        return list(self._changes)

    def show_file(self, ref: str, path: str) -> bytes:
        self.shown.append(path)
        return self._base[path].encode("utf-8")

    def list_sources(self, ref: str, directory: str) -> List[str]:
        names = []
        for path in self._base:
            posix = PurePosixPath(path)
            parent = posix.parent.as_posix()
            if parent == directory and not posix.name.endswith("_test.go"):
                names.append(posix.name)
        if not names:
            raise FileNotFoundError(directory)
        return sorted(names)


class RepoBuilder:
    """Utility for writing a working tree and a base revision side by side."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()
        self._base: Dict[str, str] = {}
        self._changes: List[FileChange] = []

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the working tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(_normalise(content), encoding="utf-8")

    def write_base(self, files: Mapping[str, str]) -> None:
        """Record `path -> contents` entries as of the base revision."""
        for relative, content in files.items():
            self._base[relative] = _normalise(content)

    def change(self, mode: ChangeMode, path: str, old_path: str | None = None) -> None:
        self._changes.append(FileChange(mode=mode, path=path, old_path=old_path or path))

    def repository(self) -> FakeRepository:
        return FakeRepository(self.root, self._base, self._changes)

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


def _normalise(content: str) -> str:
    return textwrap.dedent(content).lstrip("\n")


__all__ = ["FakeRepository", "RepoBuilder"]
