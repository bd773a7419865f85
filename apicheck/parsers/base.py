"""Parsed source structures and the parser plugin contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from ..models import Position


@dataclass(frozen=True)
class ReceiverSpec:
    """Method receiver: the base type name and whether it is a pointer."""

    type_name: str
    pointer: bool


@dataclass(frozen=True)
class Signature:
    """Normalized function signature; parameter names are not retained."""

    params: Sequence[str] = ()
    results: Sequence[str] = ()
    variadic: bool = False
    type_params: str = ""

    def render(self, name: str = "func") -> str:
        params = ", ".join(self.params)
        if not self.results:
            results = ""
        elif len(self.results) == 1:
            results = f" {self.results[0]}"
        else:
            results = f" ({', '.join(self.results)})"
        return f"{name}{self.type_params}({params}){results}"


@dataclass(frozen=True)
class FuncDecl:
    """Top-level function or method declaration."""

    name: str
    position: Position
    signature: Signature
    receiver: Optional[ReceiverSpec] = None


@dataclass(frozen=True)
class FieldSpec:
    """Struct field, or embedded element of an interface."""

    name: str
    type: str
    position: Position
    embedded: bool = False


@dataclass(frozen=True)
class MethodSpec:
    """Interface method element."""

    name: str
    signature: Signature
    position: Position


@dataclass(frozen=True)
class TypeDecl:
    """Top-level type declaration with its struct or interface members."""

    name: str
    position: Position
    underlying: str
    type_params: str = ""
    alias: bool = False
    fields: Sequence[FieldSpec] = ()
    methods: Sequence[MethodSpec] = ()
    embeds: Sequence[FieldSpec] = ()


@dataclass(frozen=True)
class ValueDecl:
    """Single name from a const or var declaration."""

    kind: str
    name: str
    type: str
    position: Position


TopLevelDecl = Union[FuncDecl, TypeDecl, ValueDecl]


@dataclass
class ParsedFile:
    """Declarations of one source file in source order."""

    path: str
    package: str
    decls: List[TopLevelDecl] = field(default_factory=list)

    @property
    def has_exports(self) -> bool:
        return any(is_exported(decl.name) for decl in self.decls)


def is_exported(name: str) -> bool:
    """Return True for identifiers visible outside their package."""
    return bool(name) and name[0].isupper()


class SourceParser(ABC):
    """Contract for parsers that turn source bytes into declarations."""

    @abstractmethod
    def supports(self, path: str) -> bool:
        """Return True when this parser handles the given file."""

    @abstractmethod
    def parse(self, content: bytes, path: str) -> ParsedFile:
        """Parse the file, raising ParseError on malformed input."""
