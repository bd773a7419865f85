"""Core data models shared across apicheck components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple


class DeclKind(str, Enum):
    """Kinds of exported program elements."""

    FUNCTION = "Function"
    METHOD = "Method"
    TYPE = "Type"
    FIELD = "Field"
    CONSTANT = "Constant"
    VARIABLE = "Variable"


Identity = Tuple[DeclKind, str, Optional[str]]


@dataclass(frozen=True)
class Position:
    """Source location of a declaration, used for messages only."""

    path: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Declaration:
    """One exported program element and its comparable shape."""

    kind: DeclKind
    name: str
    shape: str
    position: Position = field(compare=False)
    receiver: Optional[str] = None
    owner: Optional[str] = None

    @property
    def identity(self) -> Identity:
        return (self.kind, self.name, self.receiver or self.owner)

    @property
    def qualified_name(self) -> str:
        parent = self.receiver or self.owner
        return f"{parent}.{self.name}" if parent else self.name

    def same_shape(self, other: "Declaration") -> bool:
        return self.shape == other.shape


class DeclarationIndex:
    """Exported declarations of one package snapshot, keyed by identity."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        self._entries: Dict[Identity, Declaration] = {}

    def record(self, declaration: Declaration) -> None:
        # Conflicting build-tag variants collapse onto the last one seen.
        self._entries[declaration.identity] = declaration

    def lookup(self, identity: Identity) -> Optional[Declaration]:
        return self._entries.get(identity)

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._entries.values())


class FindingKind(str, Enum):
    """Verdict for a single base declaration."""

    UNCHANGED = "unchanged"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class Finding:
    """Comparison verdict carrying the base and, when present, current declaration."""

    kind: FindingKind
    base: Declaration
    current: Optional[Declaration] = None


__all__ = [
    "DeclKind",
    "Declaration",
    "DeclarationIndex",
    "Finding",
    "FindingKind",
    "Identity",
    "Position",
]
