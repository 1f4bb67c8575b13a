"""
Module: integrity.validator

Purpose:
    Reconcile one package's manifest with the workspace: canonical
    versions for every declared dependency, declared dependencies matching
    what the sources import, and the manifest persisted only if changed.
    Findings are corrected in place, not just reported, so a second run
    over the result finds nothing.

Key Classes:
    - PackageValidator: normalize_versions() and validate()

Dependencies:
    - resolution.DependencyResolver: Canonical specs
    - integrity.sources: Source discovery and import identities
    - integrity.aggregator: Aggregator special case
    - core.utils: Canonical manifest text, locked writes

Used By:
    - integrity.controller
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from integrity_toolkit.core.models import Finding, FindingKind, Package, Workspace
from integrity_toolkit.core.utils import canonical_manifest_text, write_if_changed
from integrity_toolkit.resolution import DependencyResolver

from .aggregator import AggregatorSynchronizer
from .config import IntegrityConfig
from .sources import find_source_files, read_package_imports

logger = logging.getLogger(__name__)


class PackageValidator:
    """
    Package integrity validator.

    Steps for a package P (see validate()):
    1. Normalize every dependency/devDependency to its canonical spec
    2. Synchronize the aggregator first if P is the aggregator
    3. Collect import identities from P's source files
    4. Add missing dependencies (unless excepted)
    5. Remove unused dependencies (unless excepted)
    6. Persist the manifest if its canonical text changed

    A package without source files only gets steps 1 and 6.

    Attributes:
        workspace: Workspace being reconciled
        resolver: Run-scoped resolver
        config: Run configuration (exception lists, source patterns)
        aggregator: Synchronizer for the aggregator package, if configured
    """

    def __init__(
        self,
        workspace: Workspace,
        resolver: DependencyResolver,
        config: IntegrityConfig,
        aggregator: Optional[AggregatorSynchronizer] = None,
    ):
        self.workspace = workspace
        self.resolver = resolver
        self.config = config
        if aggregator is None and config.aggregator is not None:
            aggregator = AggregatorSynchronizer(
                workspace, config.aggregator, resolver=resolver, dry_run=config.dry_run
            )
        self.aggregator = aggregator
        self._prefetched: Dict[str, Set[str]] = {}

    # ------------------------------------------------------------------
    # Individual steps
    # ------------------------------------------------------------------

    def normalize_versions(self, package: Package) -> None:
        """Replace every declared spec with the canonical one."""
        for deps in (package.dependencies, package.dev_dependencies):
            for name in list(deps):
                deps[name] = self.resolver.resolve(name)

    def source_files(self, package: Package) -> List[Path]:
        return find_source_files(package, self.config.source_patterns)

    def collect_imports(self, package: Package, files: Optional[List[Path]] = None) -> Set[str]:
        """
        Package identities imported by the package's sources.

        Uses results from prefetch_imports() when available.

        Raises:
            IntegrityError: If a source file cannot be read
        """
        if package.name in self._prefetched:
            return self._prefetched.pop(package.name)
        if files is None:
            files = self.source_files(package)
        return read_package_imports(package, files)

    def prefetch_imports(self, packages: Iterable[Package], max_workers: int) -> None:
        """
        Extract imports of many packages in a thread pool.

        Only reads files. The aggregator is skipped because its index is
        regenerated during validation, before its imports are read.
        """
        targets = [
            p for p in packages
            if not self.config.is_aggregator(p.name) and self.source_files(p)
        ]
        if not targets:
            return
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(self.collect_imports, targets))
        for package, identities in zip(targets, results):
            self._prefetched[package.name] = identities
        logger.debug(f"Prefetched imports for {len(targets)} packages")

    def _check_missing(self, package: Package, names: Set[str]) -> List[Finding]:
        findings = []
        exceptions = self.config.exceptions
        for name in sorted(names):
            if name in package.dependencies or exceptions.ignores_missing(package.name, name):
                continue
            findings.append(Finding.missing(name))
            package.dependencies[name] = self.resolver.resolve(name)
        return findings

    def _check_unused(self, package: Package, names: Set[str]) -> List[Finding]:
        findings = []
        exceptions = self.config.exceptions
        for name in sorted(package.dependencies):
            if name in names or exceptions.ignores_unused(package.name, name):
                continue
            findings.append(Finding.unused(name))
            del package.dependencies[name]
        return findings

    def persist(self, package: Package) -> bool:
        """Write the manifest if its canonical text differs from disk."""
        text = canonical_manifest_text(package.to_manifest())
        return write_if_changed(package.manifest_path, text, dry_run=self.config.dry_run)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def validate(self, package: Package) -> List[Finding]:
        """
        Reconcile one package.

        Args:
            package: Package to reconcile (mutated in place)

        Returns:
            Findings in order: aggregator updates, missing, unused,
            `Package data changed`

        Raises:
            ResolutionError: If a dependency has no canonical spec (fatal)
            IntegrityError: If a source or index file cannot be read

        Example:
            >>> [f.message for f in validator.validate(workspace.get("a"))]
            ['Missing dependency: lodash', 'Package data changed']
        """
        findings: List[Finding] = []
        self.normalize_versions(package)

        files = self.source_files(package)
        if files:
            if self.aggregator is not None and self.config.is_aggregator(package.name):
                findings.extend(self.aggregator.synchronize(package))
                # Read the regenerated index from memory; in dry-run it is not on disk
                index_path = self.aggregator.index_path(package)
                names = read_package_imports(
                    package,
                    [f for f in files if f != index_path],
                    [self.aggregator.rendered_index],
                )
            else:
                names = self.collect_imports(package, files)

            findings.extend(self._check_missing(package, names))
            findings.extend(self._check_unused(package, names))
        else:
            logger.debug(f"{package.name}: no source files, skipping import checks")

        changed = Finding(FindingKind.PACKAGE_DATA_CHANGED)
        # The aggregator may already have reported its own manifest rewrite
        if self.persist(package) and changed not in findings:
            findings.append(changed)

        if findings:
            logger.info(f"{package.name}: {len(findings)} findings")
        return findings
