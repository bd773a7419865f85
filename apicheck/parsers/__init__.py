"""Source parsers producing declaration lists for apicheck."""

from __future__ import annotations

from .base import (
    FieldSpec,
    FuncDecl,
    MethodSpec,
    ParsedFile,
    ReceiverSpec,
    Signature,
    SourceParser,
    TopLevelDecl,
    TypeDecl,
    ValueDecl,
    is_exported,
)
from .go import GoParser, is_go_source

__all__ = [
    "FieldSpec",
    "FuncDecl",
    "GoParser",
    "MethodSpec",
    "ParsedFile",
    "ReceiverSpec",
    "Signature",
    "SourceParser",
    "TopLevelDecl",
    "TypeDecl",
    "ValueDecl",
    "is_exported",
    "is_go_source",
]
