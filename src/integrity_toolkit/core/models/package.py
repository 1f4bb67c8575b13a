"""
Module: package

Purpose:
    Provides the Package dataclass - the in-memory record of one workspace
    package manifest (package.json). Unlike most models this one is mutable:
    reconciliation rewrites its dependency maps in place and the result is
    persisted back to disk only when the canonical text changes.

Key Functions:
    - Package.from_manifest(): Build a Package from a parsed manifest
    - Package.to_manifest(): Rebuild the manifest mapping for serialization
    - Package.relative_path(): Workspace-relative location

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - core.models.workspace.Workspace
    - registry.loader
    - integrity.validator, integrity.aggregator, integrity.hoister
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

DEPENDENCIES_KEY = "dependencies"
DEV_DEPENDENCIES_KEY = "devDependencies"


@dataclass(eq=False)
class Package:
    """
    One workspace package (mutable).

    Attributes:
        name: Declared package name, unique within the workspace
        path: Absolute package directory
        version: Declared version string
        dependencies: Mapping dependency name -> version spec
        dev_dependencies: Mapping dependency name -> version spec
        manifest_path: Path to the package.json this record was read from
        raw: Original manifest mapping; every field other than the two
            dependency maps is written back untouched

    Example:
        >>> pkg = Package.from_manifest(Path("packages/a/package.json"), data)
        >>> pkg.dependencies["lodash"] = "^4.17.0"
        >>> pkg.to_manifest()["dependencies"]
        {'lodash': '^4.17.0'}
    """
    name: str
    path: Path
    version: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    manifest_path: Optional[Path] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_manifest(cls, manifest_path: Path, data: Dict[str, Any]) -> "Package":
        """
        Create a Package from a parsed package.json mapping.

        The mapping is deep-copied so later mutation never leaks back
        into the caller's data.

        Args:
            manifest_path: Location of the package.json file
            data: Parsed manifest contents

        Returns:
            New Package instance
        """
        raw = copy.deepcopy(data)
        return cls(
            name=str(raw.get("name", "")),
            path=manifest_path.parent,
            version=str(raw.get("version", "")),
            dependencies=dict(raw.get(DEPENDENCIES_KEY) or {}),
            dev_dependencies=dict(raw.get(DEV_DEPENDENCIES_KEY) or {}),
            manifest_path=manifest_path,
            raw=raw,
        )

    def to_manifest(self) -> Dict[str, Any]:
        """
        Rebuild the manifest mapping with the current dependency maps.

        A dependency section the original manifest did not have is only
        emitted once it holds at least one entry.

        Returns:
            New dictionary suitable for canonical serialization
        """
        data = copy.deepcopy(self.raw)
        for key, deps in (
            (DEPENDENCIES_KEY, self.dependencies),
            (DEV_DEPENDENCIES_KEY, self.dev_dependencies),
        ):
            if key in data or deps:
                data[key] = dict(deps)
        return data

    def relative_path(self, root: Path) -> Path:
        """Return the package directory relative to the workspace root."""
        try:
            return self.path.relative_to(root)
        except ValueError:
            return self.path

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"
