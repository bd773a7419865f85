"""Git collaborators used by the check driver."""

from __future__ import annotations

from .diff import ChangeMode, FileChange, GitRepository

__all__ = ["ChangeMode", "FileChange", "GitRepository"]
