"""Selection of the package directories a change set touches."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Sequence, Set

from .git.diff import ChangeMode, FileChange
from .parsers.go import is_go_source

_PRIVATE_SEGMENTS = {"internal", "vendor"}


def strip_private_segments(directory: str) -> str:
    """Truncate ``directory`` at its first ``internal`` or ``vendor`` segment.

    Returns an empty string when no public prefix remains.
    """
    parts = PurePosixPath(directory.replace("\\", "/")).parts
    if not parts:
        return "."
    public: List[str] = []
    for part in parts:
        if part in _PRIVATE_SEGMENTS:
            break
        public.append(part)
    if not public:
        return ""
    return PurePosixPath(*public).as_posix()


def package_directories(
    changes: Iterable[FileChange], exclude: Sequence[str] = ()
) -> List[str]:
    """Return the sorted package directories whose base files need checking.

    Added files have no base counterpart and are ignored. Renames and copies
    are attributed to the directory of their old path only.
    """
    directories: Set[str] = set()
    for change in changes:
        if change.mode is ChangeMode.ADDED:
            continue
        path = PurePosixPath(change.old_path.replace("\\", "/"))
        if not is_go_source(path.name):
            continue
        directory = strip_private_segments(path.parent.as_posix())
        if not directory:
            continue
        if _is_excluded(directory, exclude):
            continue
        directories.add(directory)
    return sorted(directories)


def list_current_sources(root: Path, directory: str) -> List[str]:
    """List non-test Go file names present on disk in ``directory``.

    Raises FileNotFoundError when the directory no longer exists and other
    OSError subclasses when it cannot be read.
    """
    target = root / directory
    if not target.is_dir():
        raise FileNotFoundError(f"{directory} does not exist in the working tree")
    with os.scandir(target) as entries:
        names = [entry.name for entry in entries if entry.is_file() and is_go_source(entry.name)]
    return sorted(names)


def _is_excluded(directory: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        stripped = pattern.rstrip("/")
        if fnmatch(directory, stripped) or directory.startswith(f"{stripped}/"):
            return True
    return False


__all__ = ["list_current_sources", "package_directories", "strip_private_segments"]
