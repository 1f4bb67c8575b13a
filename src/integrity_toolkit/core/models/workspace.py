"""
Module: workspace

Purpose:
    Provides the Workspace container - every Package under management in one
    run, indexed by name and by directory, plus the root manifest.

Key Classes:
    - Workspace: Package index with get/all/path_of lookups

Dependencies:
    - pathlib (std)
    - .package.Package

Used By:
    - registry.loader: Builds the Workspace
    - resolution.lookups.WorkspaceLookup
    - integrity.*: Reconciliation passes
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from .package import Package


class Workspace:
    """
    Set of workspace packages for one run.

    Enumeration order is the order packages were added, which the loader
    makes the sorted order of package directories. The index is fixed after
    loading; only the Package records themselves are mutated.

    Attributes:
        root: Workspace root directory
        root_manifest: Package record for the top-level package.json
    """

    def __init__(
        self,
        root: Path,
        root_manifest: Package,
        packages: Iterable[Package] = (),
    ):
        self.root = root
        self.root_manifest = root_manifest
        self._by_name: Dict[str, Package] = {}
        self._by_path: Dict[Path, Package] = {}
        for package in packages:
            self.add(package)

    def add(self, package: Package) -> None:
        """
        Register a package.

        Raises:
            ValueError: If a package with the same name is already registered
        """
        if package.name in self._by_name:
            raise ValueError(f"Duplicate package name: {package.name}")
        self._by_name[package.name] = package
        self._by_path[package.path] = package

    def get(self, name: str) -> Package:
        """
        Get a package by name.

        Raises:
            KeyError: If no workspace package has that name
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"Not a workspace package: {name}") from None

    def find(self, name: str) -> Optional[Package]:
        """Get a package by name, or None."""
        return self._by_name.get(name)

    def all(self) -> List[Package]:
        """All packages in enumeration order."""
        return list(self._by_name.values())

    def names(self) -> List[str]:
        """All package names in enumeration order."""
        return list(self._by_name)

    def path_of(self, name: str) -> Path:
        """Directory of the named package."""
        return self.get(name).path

    def by_path(self, path: Path) -> Optional[Package]:
        """Package located at a directory, or None."""
        return self._by_path.get(path)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Package]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"Workspace(root={self.root!s}, packages={len(self)})"
