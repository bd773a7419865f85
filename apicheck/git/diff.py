"""Git access for changed files and base-revision content."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Iterable, List

from ..errors import GitError
from ..logging import get_logger
from ..parsers.go import is_go_source

logger = get_logger("git")

_MISSING_OBJECT = "Not a valid object name"


class ChangeMode(str, Enum):
    """Change kinds reported by ``git diff --name-status``."""

    ADDED = "A"
    COPIED = "C"
    DELETED = "D"
    MODIFIED = "M"
    RENAMED = "R"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"
    BROKEN = "B"


_TWO_PATH_MODES = {ChangeMode.RENAMED, ChangeMode.COPIED}


@dataclass(frozen=True)
class FileChange:
    """One changed path; ``old_path`` differs from ``path`` for renames and copies."""

    mode: ChangeMode
    path: str
    old_path: str


class GitRepository:
    """Reads change metadata and historical file content through the git CLI."""

    def __init__(self, path: str | Path, runner: Callable[..., Any] | None = None) -> None:
        self.path = Path(path)
        self._runner = runner or self._default_runner

    def changed_files(self, ref: str) -> List[FileChange]:
        """Return the changes between ``ref`` and the working tree."""
        output = self._run(["git", "-c", "core.quotepath=off", "diff", "--name-status", ref])
        changes: List[FileChange] = []
        for line in output.splitlines():
            if not line:
                continue
            changes.append(_parse_status_line(line))
        logger.debug("git diff against %s reported %d changed paths", ref, len(changes))
        return changes

    def show_file(self, ref: str, path: str) -> bytes:
        """Return the raw bytes of ``path`` as of ``ref``."""
        return self._run(["git", "cat-file", "blob", f"{ref}:{path}"], text=False)

    def list_sources(self, ref: str, directory: str) -> List[str]:
        """List non-test Go file names in ``directory`` as of ``ref``.

        Raises FileNotFoundError when the directory does not exist at ``ref``.
        """
        treeish = f"{ref}:{_tree_path(directory)}"
        try:
            output = self._run(["git", "-c", "core.quotepath=off", "ls-tree", treeish])
        except GitError as exc:
            if _MISSING_OBJECT in str(exc):
                raise FileNotFoundError(f"{directory} does not exist at {ref}") from exc
            raise
        names: List[str] = []
        for line in output.splitlines():
            if not line:
                continue
            meta, _, name = line.partition("\t")
            fields = meta.split()
            if len(fields) != 3 or not name:
                raise GitError(f"ls-tree: unexpected line: {line!r}")
            if fields[1] != "blob" or not is_go_source(name):
                continue
            names.append(name)
        return sorted(names)

    # ------------------------------------------------------------------
    # Internals

    def _run(self, args: Iterable[str], *, text: bool = True) -> Any:
        if not (self.path / ".git").exists():
            raise GitError(f"{self.path} is not a Git repository")
        args = list(args)
        try:
            return self._runner(args, cwd=self.path, capture_output=True, text=text)
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            stderr = stderr.strip()
            raise GitError(f"{' '.join(args)} failed: {stderr or exc}") from exc
        except OSError as exc:
            raise GitError(f"unable to run git: {exc}") from exc

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
        text: bool = True,
    ) -> Any:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=text,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return "" if text else b""


def _parse_status_line(line: str) -> FileChange:
    chops = line.split("\t")
    if len(chops) < 2 or not chops[0]:
        raise GitError(f"unexpected git output: {line!r}")
    try:
        mode = ChangeMode(chops[0][0])
    except ValueError:
        raise GitError(f"invalid change type: {line!r}") from None
    if mode in _TWO_PATH_MODES:
        if len(chops) != 3:
            raise GitError(f"unexpected git output: {line!r}")
        return FileChange(mode=mode, path=chops[2], old_path=chops[1])
    return FileChange(mode=mode, path=chops[1], old_path=chops[1])


def _tree_path(directory: str) -> str:
    normalized = PurePosixPath(directory.replace("\\", "/")).as_posix()
    return "" if normalized == "." else normalized


__all__ = ["ChangeMode", "FileChange", "GitRepository"]
