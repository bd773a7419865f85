"""Comparison of a base package snapshot against the current index."""

from __future__ import annotations

from typing import Iterable

from .logging import get_logger
from .models import Declaration, DeclarationIndex, Finding, FindingKind
from .parsers.base import ParsedFile
from .report import Report
from .summary import expand_declarations

logger = get_logger("compare")
trace = get_logger("trace")


class DeclComparer:
    """Classifies every exported base declaration against the current index."""

    def __init__(self, index: DeclarationIndex) -> None:
        self.index = index
        self.report = Report(directory=index.directory)

    def add_file(self, parsed: ParsedFile) -> None:
        if not parsed.has_exports:
            logger.debug("Skipping base %s: no exported declarations", parsed.path)
            return
        for declaration in expand_declarations(parsed):
            self.report.add(self.classify(declaration))

    def classify(self, base: Declaration) -> Finding:
        current = self.index.lookup(base.identity)
        if current is None:
            finding = Finding(kind=FindingKind.REMOVED, base=base)
        elif not base.same_shape(current):
            finding = Finding(kind=FindingKind.CHANGED, base=base, current=current)
        else:
            finding = Finding(kind=FindingKind.UNCHANGED, base=base, current=current)
        trace.debug(
            "%s %s %s: %s",
            finding.kind.value,
            base.kind.value,
            base.qualified_name,
            base.shape,
        )
        return finding


def compare(index: DeclarationIndex, base_files: Iterable[ParsedFile]) -> Report:
    """Compare base files against the current index and return the report."""
    comparer = DeclComparer(index)
    for parsed in base_files:
        comparer.add_file(parsed)
    return comparer.report


__all__ = ["DeclComparer", "compare"]
