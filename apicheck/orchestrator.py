"""Check pipeline: from changed files to per-package reports."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from .compare import compare
from .git.diff import GitRepository
from .logging import get_logger
from .packages import list_current_sources, package_directories
from .parsers.base import ParsedFile, SourceParser
from .parsers.go import GoParser
from .report import Report
from .summary import build_index


@dataclass
class CheckOutcome:
    """Reports for every checked package directory, in directory order."""

    base: str
    reports: List[Report] = field(default_factory=list)
    fail_on_removed_package: bool = False

    @property
    def failed(self) -> bool:
        for report in self.reports:
            if report.package_removed:
                if self.fail_on_removed_package:
                    return True
            elif not report.is_clean:
                return True
        return False

    def render(self) -> str:
        blocks = [report.render() for report in self.reports]
        return "\n\n".join(block for block in blocks if block)


class Orchestrator:
    """Coordinates change enumeration, parsing, indexing and comparison."""

    def __init__(
        self,
        repository: GitRepository | None = None,
        parser: SourceParser | None = None,
        jobs: int = 1,
    ) -> None:
        self.repository = repository
        self.parser = parser or GoParser()
        self.jobs = max(1, jobs)
        self.logger = get_logger("orchestrator")

    def run_check(
        self,
        path: str,
        base_ref: str,
        *,
        exclude_paths: Sequence[str] = (),
        fail_on_removed_package: bool = False,
    ) -> CheckOutcome:
        """Check every package touched since ``base_ref`` for API breakage."""
        repo_path = Path(path).expanduser().resolve()
        repository = self.repository or GitRepository(repo_path)
        self.logger.info("Starting check for %s (base=%s)", repo_path, base_ref)

        changes = repository.changed_files(base_ref)
        directories = package_directories(changes, exclude=exclude_paths)
        self.logger.debug("Checking %d package directories", len(directories))

        outcome = CheckOutcome(base=base_ref, fail_on_removed_package=fail_on_removed_package)
        if self.jobs > 1 and len(directories) > 1:
            with ThreadPoolExecutor(max_workers=self.jobs) as pool:
                outcome.reports = list(
                    pool.map(
                        lambda directory: self.check_package(
                            repository, repo_path, directory, base_ref
                        ),
                        directories,
                    )
                )
        else:
            outcome.reports = [
                self.check_package(repository, repo_path, directory, base_ref)
                for directory in directories
            ]
        return outcome

    def check_package(
        self,
        repository: GitRepository,
        repo_path: Path,
        directory: str,
        base_ref: str,
    ) -> Report:
        """Compare one package directory's base files against its working tree."""
        try:
            current_names = list_current_sources(repo_path, directory)
        except OSError as exc:
            # A directory that cannot be listed is treated as removed.
            self.logger.debug("%s: package removed (%s)", directory, exc)
            return Report(directory=directory, package_removed=True)
        self.logger.debug("Checking %s", directory)

        current = [
            self._parse((repo_path / _join(directory, name)).read_bytes(), _join(directory, name))
            for name in current_names
        ]
        index = build_index(directory, current)

        try:
            base_names = repository.list_sources(base_ref, directory)
        except FileNotFoundError:
            self.logger.warning("%s has no source files at %s", directory, base_ref)
            base_names = []
        base = [
            self._parse(repository.show_file(base_ref, _join(directory, name)), _join(directory, name))
            for name in base_names
        ]
        report = compare(index, base)
        if not report.is_clean:
            self.logger.debug("%s: %d incompatible changes", directory, len(report))
        return report

    def _parse(self, content: bytes, path: str) -> ParsedFile:
        return self.parser.parse(content, path)


def _join(directory: str, name: str) -> str:
    return name if directory in {"", "."} else f"{directory}/{name}"


__all__ = ["CheckOutcome", "Orchestrator"]
