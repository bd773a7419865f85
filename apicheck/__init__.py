"""Breaking-change detection for exported Go package APIs."""

from __future__ import annotations

from .compare import DeclComparer, compare
from .models import DeclKind, Declaration, DeclarationIndex, Finding, FindingKind, Position
from .report import Report
from .summary import PackageSummary, build_index, expand_declarations

__version__ = "0.1.0"

__all__ = [
    "DeclComparer",
    "DeclKind",
    "Declaration",
    "DeclarationIndex",
    "Finding",
    "FindingKind",
    "PackageSummary",
    "Position",
    "Report",
    "build_index",
    "compare",
    "expand_declarations",
]
