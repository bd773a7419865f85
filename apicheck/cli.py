"""CLI entrypoint for apicheck."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, load_config
from .errors import ApiCheckError, ParseError
from .logging import configure_logging
from .orchestrator import Orchestrator


def _add_verbose_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-vv",
        "--trace",
        action="store_true",
        default=False,
        help="Log every compared declaration (very noisy).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apicheck",
        description="Detect breaking changes to exported Go APIs against a base revision.",
    )
    _add_verbose_options(parser)
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    parser.add_argument(
        "--base",
        default=None,
        help="Git reference to compare against (default: HEAD).",
    )
    parser.add_argument(
        "--exit-code",
        type=int,
        default=None,
        help="Exit code to use when incompatible changes are found (default: 0).",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Number of package directories to check concurrently.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to the configuration file (defaults to <path>/{CONFIG_FILENAME}).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for apicheck."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), trace=bool(args.trace), log_file=args.log_file
    )

    try:
        config = load_config(args.config or Path(args.path))
    except ApiCheckError as exc:
        parser.exit(1, f"{exc}\n")

    base = args.base or config.base
    exit_code = args.exit_code if args.exit_code is not None else config.exit_code
    jobs = args.jobs if args.jobs is not None else config.jobs

    orchestrator = Orchestrator(jobs=jobs)
    try:
        outcome = orchestrator.run_check(
            args.path,
            base,
            exclude_paths=config.exclude_paths,
            fail_on_removed_package=config.fail_on_removed_package,
        )
    except ParseError as exc:
        parser.exit(1, f"parse error: {exc}\n")
    except ApiCheckError as exc:
        parser.exit(1, f"apicheck failed: {exc}\nRun with --verbose for more details.\n")

    rendered = outcome.render()
    if rendered:
        print(rendered)
        print()
    if outcome.failed and exit_code:
        parser.exit(exit_code)


if __name__ == "__main__":
    main(sys.argv[1:])
