"""
Command-line entry point for the workspace integrity check.

Usage:
    integrity-check [ROOT] [--config PATH] [--registry] [--jobs N] [--dry-run] [-v]

Exit codes:
    0 - repo integrity verified (no findings)
    1 - findings were corrected; commit the changes (or re-run locally in CI)
    2 - fatal error (unresolvable dependency, unusable workspace, bad config)
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

from integrity_toolkit import __version__
from integrity_toolkit.core.models import IntegrityReport
from integrity_toolkit.integrity import (
    CONFIG_FILENAME,
    ConfigError,
    IntegrityError,
    ensure_integrity,
    load_config,
)
from integrity_toolkit.registry import WorkspaceError
from integrity_toolkit.resolution import ResolutionError

logger = logging.getLogger("integrity_toolkit")

# Environment variables marking an unattended verification run
CI_ENV_VARS = ("CI", "TRAVIS_BRANCH", "GITHUB_ACTIONS")

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_FATAL = 2


def is_ci(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True if running in an unattended verification context."""
    environ = os.environ if environ is None else environ
    return any(environ.get(name) for name in CI_ENV_VARS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="integrity-check",
        description="Ensure the integrity of the packages in a monorepo workspace.",
    )
    parser.add_argument(
        "root", nargs="?", type=Path, default=Path("."),
        help="Workspace root directory (default: current directory)",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help=f"Configuration file (default: ROOT/{CONFIG_FILENAME} if present)",
    )
    parser.add_argument(
        "--registry", action="store_true",
        help="Resolve unknown dependencies with `npm view`",
    )
    parser.add_argument(
        "--jobs", "-j", type=int, default=None,
        help="Worker threads for import extraction",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Report findings without writing any file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def print_report(report: IntegrityReport, *, ci: bool) -> None:
    """Print the findings and what the operator should do next."""
    print(report.to_json())
    if ci:
        print("\n\nPlease run `integrity-check` locally and commit the changes")
    else:
        print("\n\nPlease commit the changes by running:")
        print('git commit -a -m "Package integrity updates"')


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s | %(message)s",
    )

    root = args.root.resolve()
    try:
        if args.config is not None:
            config = load_config(args.config, required=True)
        else:
            config = load_config(root / CONFIG_FILENAME)

        overrides = {}
        if args.registry:
            overrides["use_registry"] = True
        if args.jobs is not None:
            overrides["jobs"] = args.jobs
        if args.dry_run:
            overrides["dry_run"] = True
        config = dataclasses.replace(config, **overrides)

        report = ensure_integrity(root, config)
    except (ResolutionError, WorkspaceError, ConfigError, IntegrityError, ValueError) as e:
        logger.error(str(e))
        return EXIT_FATAL

    if not report.ok:
        print_report(report, ci=is_ci())
        return EXIT_FINDINGS

    print("Repo integrity verified!")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
