"""Per-package reports of incompatible API changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .models import Finding, FindingKind


@dataclass
class Report:
    """Ordered non-unchanged findings for one package directory."""

    directory: str
    findings: List[Finding] = field(default_factory=list)
    package_removed: bool = False

    def add(self, finding: Finding) -> None:
        if finding.kind is FindingKind.UNCHANGED:
            return
        self.findings.append(finding)

    @property
    def is_clean(self) -> bool:
        return not self.findings

    def __len__(self) -> int:
        return len(self.findings)

    def render(self) -> str:
        """Render the report as text; clean reports render as an empty string."""
        if self.package_removed:
            return f"{self.directory}: package removed"
        if self.is_clean:
            return ""
        lines = [f"{self.directory}:"]
        for finding in self.findings:
            lines.extend(_render_finding(finding))
        return "\n".join(lines)


def _render_finding(finding: Finding) -> List[str]:
    base = finding.base
    header = f"  {finding.kind.value}: {base.kind.value} {base.qualified_name} ({base.position})"
    if finding.kind is not FindingKind.CHANGED or finding.current is None:
        return [header]
    return [
        header,
        f"    base:    {base.shape or '<inferred>'}",
        f"    current: {finding.current.shape or '<inferred>'} ({finding.current.position})",
    ]


__all__ = ["Report"]
