"""
Module: integrity.hoister

Purpose:
    Hoist every package's devDependencies into the root package.json so
    the root is a superset of all of them, with the same specs.

Key Classes:
    - RootHoister: One hoisting pass over the workspace

Used By:
    - integrity.controller: Runs once before per-package validation
"""

from __future__ import annotations

import logging
from typing import List

from integrity_toolkit.core.models import Finding, FindingKind, Workspace
from integrity_toolkit.core.utils import canonical_manifest_text, write_if_changed

logger = logging.getLogger(__name__)


class RootHoister:
    """
    Copies package devDependencies into the root manifest.

    Entries are copied in workspace order, later packages overwriting
    earlier ones on a name collision. Specs are taken as they stand on
    the packages; nothing is re-resolved here.
    """

    def __init__(self, workspace: Workspace, *, dry_run: bool = False):
        self.workspace = workspace
        self.dry_run = dry_run

    def hoist(self) -> List[Finding]:
        """
        Merge devDependencies upward and persist the root if changed.

        Returns:
            `[updated]` if the root manifest was rewritten, else empty
        """
        root = self.workspace.root_manifest
        for package in self.workspace.all():
            root.dev_dependencies.update(package.dev_dependencies)

        text = canonical_manifest_text(root.to_manifest())
        if write_if_changed(root.manifest_path, text, dry_run=self.dry_run):
            logger.info(f"Root manifest {root.manifest_path} updated")
            return [Finding(FindingKind.ROOT_UPDATED)]
        return []
