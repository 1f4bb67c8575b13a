"""
Module: resolution.lookups

Purpose:
    Version lookup collaborators. A lookup answers "what is the canonical
    spec for this dependency name?" and must be a pure function of the
    name for the duration of one run. Returning None means the lookup
    cannot answer; the resolver turns an overall None into a fatal error.

Key Classes:
    - PolicyLookup: Explicit table from configuration
    - WorkspaceLookup: Workspace packages and existing declarations
    - NpmViewLookup: Registry query through the npm CLI (opt-in)
    - ChainedLookup: First answer wins

Key Functions:
    - build_lookup(): Default chain for a workspace and configuration

Dependencies:
    - subprocess (std): npm CLI

Used By:
    - resolution.resolver.DependencyResolver
    - integrity.controller
"""

from __future__ import annotations

import logging
import subprocess
from typing import Mapping, Optional, Protocol

from integrity_toolkit.core.models import Workspace

logger = logging.getLogger(__name__)


class VersionLookup(Protocol):
    """Callable mapping a dependency name to a version spec (or None)."""

    def __call__(self, name: str) -> Optional[str]: ...


class PolicyLookup:
    """
    Canonical specs from an explicit policy table.

    Example:
        >>> PolicyLookup({"typescript": "~4.1.3"})("typescript")
        '~4.1.3'
    """

    def __init__(self, table: Mapping[str, str]):
        self._table = dict(table)

    def __call__(self, name: str) -> Optional[str]:
        return self._table.get(name)


class WorkspaceLookup:
    """
    Canonical specs derived from the workspace itself.

    A workspace package resolves to a caret range of its own version.
    Any other name resolves to the first declaration found, searching
    the root manifest and then packages sorted by name (dependencies
    before devDependencies in each).
    """

    def __init__(self, workspace: Workspace):
        self._workspace = workspace

    def __call__(self, name: str) -> Optional[str]:
        local = self._workspace.find(name)
        if local is not None:
            return f"^{local.version}"

        manifests = [self._workspace.root_manifest]
        manifests.extend(sorted(self._workspace.all(), key=lambda p: p.name))
        for package in manifests:
            for deps in (package.dependencies, package.dev_dependencies):
                if name in deps:
                    return deps[name]
        return None


class NpmViewLookup:
    """
    Latest published version from the npm registry, as a tilde range.

    Runs ``npm view <name> version``. Any failure of the command yields
    None so a later lookup (or the resolver's error) decides.
    """

    def __init__(self, executable: str = "npm", timeout: float = 60.0):
        self.executable = executable
        self.timeout = timeout

    def __call__(self, name: str) -> Optional[str]:
        try:
            result = subprocess.run(
                [self.executable, "view", name, "version"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"npm view failed for {name}: {e}")
            return None
        version = result.stdout.strip()
        return f"~{version}" if version else None


class ChainedLookup:
    """Consult lookups in order; the first non-None answer wins."""

    def __init__(self, *lookups: VersionLookup):
        self._lookups = lookups

    def __call__(self, name: str) -> Optional[str]:
        for lookup in self._lookups:
            spec = lookup(name)
            if spec is not None:
                return spec
        return None


def build_lookup(
    workspace: Workspace,
    versions: Optional[Mapping[str, str]] = None,
    *,
    use_registry: bool = False,
) -> ChainedLookup:
    """
    Assemble the default lookup chain.

    Policy table -> workspace -> npm registry (only if use_registry).
    """
    lookups: list[VersionLookup] = [PolicyLookup(versions or {}), WorkspaceLookup(workspace)]
    if use_registry:
        lookups.append(NpmViewLookup())
    return ChainedLookup(*lookups)
