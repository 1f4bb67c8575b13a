"""
Module: integrity.controller

Purpose:
    Orchestrate one complete integrity pass over a workspace.
    Load → Resolve → Hoist → Validate (per package, sorted by name) → Report

Key Functions:
    - ensure_integrity(): Main entry point

Dependencies:
    - registry: Workspace loading
    - resolution: Cache, lookups, resolver
    - integrity.validator, integrity.hoister

Used By:
    - cli: Command-line entry point
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Sequence

from integrity_toolkit.core.models import IntegrityReport, TOP_KEY
from integrity_toolkit.registry import load_workspace
from integrity_toolkit.resolution import (
    DependencyCache,
    DependencyResolver,
    VersionLookup,
    build_lookup,
)

from .config import CONFIG_FILENAME, IntegrityConfig, load_config
from .hoister import RootHoister
from .validator import PackageValidator

logger = logging.getLogger(__name__)


def ensure_integrity(
    root: Path,
    config: Optional[IntegrityConfig] = None,
    *,
    lookup: Optional[VersionLookup] = None,
    patterns: Optional[Sequence[str]] = None,
) -> IntegrityReport:
    """
    Run one integrity pass over the workspace at root.

    Pipeline:
    1. Load the workspace (root manifest + every package manifest)
    2. Resolution pass: normalize every package's versions, sorted by name,
       so the cache is fully populated before any parallel work
    3. Hoist devDependencies into the root manifest ("top" findings)
    4. Prefetch imports in a thread pool (if config.jobs > 1)
    5. Validate each package, sorted by name
    6. Return the report; it is ok only if nothing had to change

    Args:
        root: Workspace root directory
        config: Run configuration; read from root/integrity.json if None
        lookup: Version lookup; the default chain for the workspace if None
        patterns: Package location patterns overriding the descriptor

    Returns:
        IntegrityReport with findings grouped by package

    Raises:
        WorkspaceError: If the workspace root is unusable
        ConfigError: If integrity.json is invalid
        ResolutionError: If a dependency cannot be resolved (fatal)
        IntegrityError: If a source or index file cannot be read

    Example:
        >>> report = ensure_integrity(Path("."))
        >>> report.ok
        True
    """
    start_time = time.perf_counter()
    if config is None:
        config = load_config(root / CONFIG_FILENAME)

    workspace = load_workspace(root, patterns)
    if config.aggregator is not None and config.aggregator.package not in workspace:
        logger.warning(f"Aggregator package {config.aggregator.package} is not in the workspace")

    if lookup is None:
        lookup = build_lookup(workspace, config.versions, use_registry=config.use_registry)
    resolver = DependencyResolver(lookup, DependencyCache())
    validator = PackageValidator(workspace, resolver, config)

    packages = sorted(workspace.all(), key=lambda p: p.name)

    # 2. Resolution pass
    for package in packages:
        validator.normalize_versions(package)
    logger.info(f"Resolved {len(resolver.cache)} dependency versions")

    report = IntegrityReport()

    # 3. Root manifest
    report.add(TOP_KEY, RootHoister(workspace, dry_run=config.dry_run).hoist())

    # 4. Parallel import extraction
    if config.jobs > 1:
        validator.prefetch_imports(packages, config.jobs)

    # 5. Per-package validation
    for package in packages:
        report.add(package.name, validator.validate(package))

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"Checked {len(packages)} packages in {elapsed:.2f}s: "
        f"{len(report)} findings in {len(report.findings)} manifests"
    )
    return report
