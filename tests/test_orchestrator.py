"""End-to-end tests for the check pipeline."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from apicheck.errors import ParseError
from apicheck.git.diff import ChangeMode
from apicheck.models import DeclKind, FindingKind
from apicheck.orchestrator import Orchestrator
from tests._fixtures.repo_builder import RepoBuilder


def test_run_check_reports_breaking_changes(repo_builder: RepoBuilder) -> None:
    repo_builder.write_base(
        {
            "pkg/net/server.go": """
            package net

            type Server struct {
                Addr string
                Port int
            }

            func Listen(addr string) (*Server, error) { return nil, nil }
            """,
        }
    )
    repo_builder.write(
        {
            "pkg/net/server.go": """
            package net

            type Server struct {
                Addr string
            }

            func Listen(addr string, port int) (*Server, error) { return nil, nil }
            """,
        }
    )
    repo_builder.change(ChangeMode.MODIFIED, "pkg/net/server.go")

    outcome = Orchestrator(repository=repo_builder.repository()).run_check(
        str(repo_builder.path()), "HEAD"
    )

    assert outcome.failed
    [report] = outcome.reports
    assert report.directory == "pkg/net"
    assert [(f.kind, f.base.kind, f.base.qualified_name) for f in report.findings] == [
        (FindingKind.REMOVED, DeclKind.FIELD, "Server.Port"),
        (FindingKind.CHANGED, DeclKind.FUNCTION, "Listen"),
    ]
    rendered = outcome.render()
    assert rendered.startswith("pkg/net:\n")
    assert "  removed: Field Server.Port (pkg/net/server.go:5:5)" in rendered


def test_run_check_passes_compatible_changes(repo_builder: RepoBuilder) -> None:
    repo_builder.write_base({"lib/lib.go": "package lib\n\nfunc Do(a int) {}\n"})
    repo_builder.write(
        {
            "lib/lib.go": "package lib\n\n// Do does it.\nfunc Do(count int) {}\n\nfunc More() {}\n",
            "lib/lib_test.go": "package lib\n\nfunc broken( {\n",
        }
    )
    repo_builder.change(ChangeMode.MODIFIED, "lib/lib.go")
    repo_builder.change(ChangeMode.ADDED, "lib/lib_test.go")

    outcome = Orchestrator(repository=repo_builder.repository()).run_check(
        str(repo_builder.path()), "HEAD"
    )

    assert not outcome.failed
    assert outcome.render() == ""


def test_run_check_skips_private_and_added_packages(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"internal/x/x.go": "package x\n", "fresh/f.go": "package fresh\n"})
    repo_builder.change(ChangeMode.DELETED, "internal/x/gone.go")
    repo_builder.change(ChangeMode.ADDED, "fresh/f.go")
    repository = repo_builder.repository()

    outcome = Orchestrator(repository=repository).run_check(str(repo_builder.path()), "HEAD")

    assert outcome.reports == []
    assert repository.shown == []


def test_run_check_reports_removed_packages(repo_builder: RepoBuilder) -> None:
    repo_builder.write_base({"old/old.go": "package old\n\nfunc Old() {}\n"})
    repo_builder.change(ChangeMode.DELETED, "old/old.go")
    repository = repo_builder.repository()

    outcome = Orchestrator(repository=repository).run_check(str(repo_builder.path()), "HEAD")

    [report] = outcome.reports
    assert report.package_removed
    assert outcome.render() == "old: package removed"
    assert not outcome.failed
    assert repository.shown == []

    strict = Orchestrator(repository=repository).run_check(
        str(repo_builder.path()), "HEAD", fail_on_removed_package=True
    )
    assert strict.failed


def test_run_check_treats_unreadable_directory_as_removed(
    repo_builder: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_builder.write_base({"pkg/pkg.go": "package pkg\n\nfunc Run() {}\n"})
    repo_builder.write({"pkg/pkg.go": "package pkg\n\nfunc Run() {}\n"})
    repo_builder.change(ChangeMode.MODIFIED, "pkg/pkg.go")
    locked = (repo_builder.path() / "pkg").resolve()
    real_scandir = os.scandir

    def scandir(path):
        if Path(path).resolve() == locked:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr("apicheck.packages.os.scandir", scandir)
    repository = repo_builder.repository()

    outcome = Orchestrator(repository=repository).run_check(str(repo_builder.path()), "HEAD")

    [report] = outcome.reports
    assert report.package_removed
    assert outcome.render() == "pkg: package removed"
    assert repository.shown == []


def test_run_check_emptied_directory_reports_every_symbol(repo_builder: RepoBuilder) -> None:
    repo_builder.write_base({"api/api.go": "package api\n\nconst Version = \"1\"\n\nvar Debug bool\n"})
    repo_builder.write({"api/README.md": "docs\n"})
    repo_builder.change(ChangeMode.DELETED, "api/api.go")

    outcome = Orchestrator(repository=repo_builder.repository()).run_check(
        str(repo_builder.path()), "HEAD"
    )

    [report] = outcome.reports
    assert [(f.kind, f.base.kind, f.base.name) for f in report.findings] == [
        (FindingKind.REMOVED, DeclKind.CONSTANT, "Version"),
        (FindingKind.REMOVED, DeclKind.VARIABLE, "Debug"),
    ]


def test_run_check_handles_root_package_and_parallel_jobs(repo_builder: RepoBuilder) -> None:
    repo_builder.write_base(
        {
            "root.go": "package root\n\nfunc Root() {}\n",
            "a/a.go": "package a\n\nfunc A() {}\n",
            "b/b.go": "package b\n\nfunc B(x int) {}\n",
        }
    )
    repo_builder.write(
        {
            "root.go": "package root\n\nfunc Root() {}\n",
            "a/a.go": "package a\n",
            "b/b.go": "package b\n\nfunc B(x int) {}\n",
        }
    )
    for path in ("root.go", "a/a.go", "b/b.go"):
        repo_builder.change(ChangeMode.MODIFIED, path)

    outcome = Orchestrator(repository=repo_builder.repository(), jobs=3).run_check(
        str(repo_builder.path()), "HEAD"
    )

    assert [report.directory for report in outcome.reports] == [".", "a", "b"]
    assert [report.is_clean for report in outcome.reports] == [True, False, True]
    assert outcome.render() == "a:\n  removed: Function A (a/a.go:3:1)"


def test_run_check_propagates_parse_errors(repo_builder: RepoBuilder) -> None:
    repo_builder.write_base({"pkg/p.go": "package pkg\n\nfunc P() {}\n"})
    repo_builder.write({"pkg/p.go": "package pkg\n\nfunc P( {\n"})
    repo_builder.change(ChangeMode.MODIFIED, "pkg/p.go")

    with pytest.raises(ParseError):
        Orchestrator(repository=repo_builder.repository()).run_check(
            str(repo_builder.path()), "HEAD"
        )
