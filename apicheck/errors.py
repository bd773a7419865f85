"""Exception types raised by apicheck."""

from __future__ import annotations


class ApiCheckError(RuntimeError):
    """Base class for operational failures that abort a check run."""


class ConfigError(ApiCheckError):
    """Raised when the configuration file cannot be parsed."""


class GitError(ApiCheckError):
    """Raised when git output cannot be obtained or understood."""


class ParseError(ApiCheckError):
    """Raised when a source file does not parse cleanly."""

    def __init__(self, path: str, line: int, column: int, detail: str = "syntax error") -> None:
        super().__init__(f"{path}:{line}:{column}: {detail}")
        self.path = path
        self.line = line
        self.column = column
        self.detail = detail


__all__ = ["ApiCheckError", "ConfigError", "GitError", "ParseError"]
