"""
Module: integrity.aggregator

Purpose:
    Keep the aggregator ("all packages") package in sync with the whole
    workspace. The aggregator must depend on every other package and its
    generated index must import every other package exactly once.

Key Classes:
    - AggregatorSynchronizer: Updates the aggregator manifest and index

Key Functions:
    - import_line(): Generated index line for a package

Dependencies:
    - core.utils: Canonical manifest text, locked writes
    - resolution.DependencyResolver: Specs for newly added packages

Used By:
    - integrity.validator: Invoked for the aggregator package
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Set

from integrity_toolkit.core.models import Finding, FindingKind, Package, Workspace
from integrity_toolkit.core.utils import canonical_manifest_text, write_if_changed
from integrity_toolkit.resolution import DependencyResolver

from .config import AggregatorSpec
from .sources import IntegrityError

logger = logging.getLogger(__name__)


def import_line(name: str) -> str:
    """Generated index line importing a package for its side effects."""
    return f'import "{name}";'


class AggregatorSynchronizer:
    """
    Synchronizes the aggregator package with the workspace.

    For every other package (workspace enumeration order):
    - adds the package to the aggregator's dependencies if absent, with
      the resolver's canonical spec (`^<version>` without a resolver)
    - regenerates one import line in the index
    and reports `Updated: <name>` when either was missing.

    The index is regenerated as: the preserved header (the first
    `spec.header_lines` lines of the existing file, stopping at the first
    import line of a workspace package) followed by the import lines. Other
    lines in the header, hand-written imports included, are kept verbatim.

    Example:
        >>> sync = AggregatorSynchronizer(workspace, AggregatorSpec("@org/all"))
        >>> [f.message for f in sync.synchronize(workspace.get("@org/all"))]
        ['Updated: @org/new-package', 'Package data changed', 'Index changed']
    """

    def __init__(
        self,
        workspace: Workspace,
        spec: AggregatorSpec,
        *,
        resolver: Optional[DependencyResolver] = None,
        dry_run: bool = False,
    ):
        self.workspace = workspace
        self.spec = spec
        self.resolver = resolver
        self.dry_run = dry_run
        # Index text produced by the last synchronize(), written or not
        self.rendered_index = ""

    def index_path(self, aggregator: Package) -> Path:
        return aggregator.path / self.spec.index

    def _read_index(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"Aggregator index {path} does not exist, creating it")
            return ""
        except (OSError, UnicodeDecodeError) as e:
            raise IntegrityError(f"Cannot read aggregator index {path}: {e}") from e

    def _generated_lines(self) -> Set[str]:
        return {import_line(package.name) for package in self.workspace.all()}

    def _spec_for(self, package: Package) -> str:
        if self.resolver is None:
            return f"^{package.version}"
        return self.resolver.resolve(package.name)

    def _header(self, index: str) -> List[str]:
        header: List[str] = []
        if not index:
            return header
        generated = self._generated_lines()
        for line in index.split("\n")[: self.spec.header_lines]:
            if line.strip() in generated:
                break
            header.append(line)
        return header

    def render_index(self, index: str, aggregator: Package) -> str:
        """New index text for the current workspace."""
        lines = self._header(index)
        lines.extend(
            import_line(package.name)
            for package in self.workspace.all()
            if package is not aggregator
        )
        return "\n".join(lines) + "\n"

    def synchronize(self, aggregator: Package) -> List[Finding]:
        """
        Bring the aggregator manifest and index up to date.

        Args:
            aggregator: The aggregator Package (mutated in place)

        Returns:
            Findings: `Updated: <name>` per stale package, then
            `Package data changed` / `Index changed` if files were rewritten

        Raises:
            IntegrityError: If the existing index cannot be read
        """
        findings: List[Finding] = []
        index_path = self.index_path(aggregator)
        index = self._read_index(index_path)
        existing_lines = {line.strip() for line in index.split("\n")}

        for package in self.workspace.all():
            if package is aggregator:
                continue
            valid = True

            if package.name not in aggregator.dependencies:
                aggregator.dependencies[package.name] = self._spec_for(package)
                valid = False

            if import_line(package.name) not in existing_lines:
                valid = False

            if not valid:
                findings.append(Finding.updated(package.name))

        manifest_text = canonical_manifest_text(aggregator.to_manifest())
        if write_if_changed(aggregator.manifest_path, manifest_text, dry_run=self.dry_run):
            findings.append(Finding(FindingKind.PACKAGE_DATA_CHANGED))

        new_index = self.render_index(index, aggregator)
        self.rendered_index = new_index
        if write_if_changed(index_path, new_index, dry_run=self.dry_run):
            findings.append(Finding(FindingKind.INDEX_CHANGED))

        logger.debug(f"Aggregator {aggregator.name}: {len(findings)} findings")
        return findings
