"""Exported declaration snapshots for a package directory."""

from __future__ import annotations

from typing import Iterable, List

from .logging import get_logger
from .models import DeclKind, Declaration, DeclarationIndex
from .parsers.base import FuncDecl, ParsedFile, TypeDecl, ValueDecl, is_exported

_VALUE_KINDS = {"const": DeclKind.CONSTANT, "var": DeclKind.VARIABLE}

logger = get_logger("summary")


def expand_declarations(parsed: ParsedFile) -> List[Declaration]:
    """Return the exported declarations of a file in source order.

    Exported struct and interface types are followed by their exported
    fields and methods, each an independently identified declaration.
    Both the current snapshot and the base walk go through this function,
    so the two sides always agree on what a symbol is.
    """
    declarations: List[Declaration] = []
    for decl in parsed.decls:
        if not is_exported(decl.name):
            continue
        if isinstance(decl, FuncDecl):
            declarations.append(_function(decl))
        elif isinstance(decl, TypeDecl):
            declarations.append(_type(decl))
            declarations.extend(_members(decl))
        elif isinstance(decl, ValueDecl):
            declarations.append(
                Declaration(
                    kind=_VALUE_KINDS[decl.kind],
                    name=decl.name,
                    shape=decl.type,
                    position=decl.position,
                )
            )
    return declarations


def _function(decl: FuncDecl) -> Declaration:
    if decl.receiver is None:
        return Declaration(
            kind=DeclKind.FUNCTION,
            name=decl.name,
            shape=decl.signature.render(),
            position=decl.position,
        )
    receiver = ("*" if decl.receiver.pointer else "") + decl.receiver.type_name
    return Declaration(
        kind=DeclKind.METHOD,
        name=decl.name,
        shape=f"({receiver}) {decl.signature.render()}",
        position=decl.position,
        receiver=decl.receiver.type_name,
    )


def _type(decl: TypeDecl) -> Declaration:
    shape = f"{decl.type_params} {decl.underlying}" if decl.type_params else decl.underlying
    return Declaration(kind=DeclKind.TYPE, name=decl.name, shape=shape, position=decl.position)


def _members(decl: TypeDecl) -> Iterable[Declaration]:
    for field in decl.fields:
        if is_exported(field.name):
            yield Declaration(
                kind=DeclKind.FIELD,
                name=field.name,
                shape=field.type,
                position=field.position,
                owner=decl.name,
            )
    for method in decl.methods:
        if is_exported(method.name):
            yield Declaration(
                kind=DeclKind.METHOD,
                name=method.name,
                shape=method.signature.render(),
                position=method.position,
                receiver=decl.name,
            )
    for embed in decl.embeds:
        if is_exported(embed.name):
            yield Declaration(
                kind=DeclKind.FIELD,
                name=embed.name,
                shape=f"embedded {embed.type}",
                position=embed.position,
                owner=decl.name,
            )


class PackageSummary:
    """Collects the exported declarations of a package's current files."""

    def __init__(self, directory: str) -> None:
        self.index = DeclarationIndex(directory)

    def add_file(self, parsed: ParsedFile) -> None:
        if not parsed.has_exports:
            logger.debug("Skipping %s: no exported declarations", parsed.path)
            return
        for declaration in expand_declarations(parsed):
            self.index.record(declaration)


def build_index(directory: str, files: Iterable[ParsedFile]) -> DeclarationIndex:
    """Build the declaration index for the current state of a package."""
    summary = PackageSummary(directory)
    for parsed in files:
        summary.add_file(parsed)
    logger.debug("Indexed %d exported declarations in %s", len(summary.index), directory)
    return summary.index


__all__ = ["PackageSummary", "build_index", "expand_declarations"]
