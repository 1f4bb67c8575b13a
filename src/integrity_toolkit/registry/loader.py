"""
Module: registry.loader

Purpose:
    Discover workspace packages and load their manifests into a Workspace.
    Package locations come from the workspace descriptor (lerna.json
    "packages", else the root package.json "workspaces" field), expanded
    as globs relative to the workspace root.

Key Functions:
    - load_workspace(): Build the Workspace for a root directory
    - workspace_patterns(): Read the package location patterns
    - load_package(): Load one package directory

Key Classes:
    - WorkspaceError: Exception for an unusable workspace root

Dependencies:
    - pathlib (std)
    - core.models: Package, Workspace
    - core.schemas.validator: Manifest validation
    - core.utils.serialization: Manifest reading

Used By:
    - integrity.controller: Load phase of a run
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from integrity_toolkit.core.models import Package, Workspace
from integrity_toolkit.core.schemas import (
    validate_manifest,
    validate_root_manifest,
    ManifestValidationError,
)
from integrity_toolkit.core.utils import read_manifest, ManifestReadError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"
LERNA_FILENAME = "lerna.json"
DEFAULT_PATTERNS: tuple[str, ...] = ("packages/*",)


class WorkspaceError(Exception):
    """The workspace root cannot be used."""
    pass


def workspace_patterns(root: Path, root_data: dict) -> List[str]:
    """
    Read the package location patterns for a workspace.

    Order of precedence:
    1. "packages" list of lerna.json
    2. "workspaces" of the root package.json (list, or {"packages": [...]})
    3. ["packages/*"]

    Args:
        root: Workspace root directory
        root_data: Parsed root package.json

    Returns:
        List of glob patterns relative to root

    Raises:
        WorkspaceError: If lerna.json exists but cannot be parsed
    """
    lerna_path = root / LERNA_FILENAME
    if lerna_path.exists():
        try:
            lerna = json.loads(lerna_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise WorkspaceError(f"Cannot read {lerna_path}: {e}") from e
        packages = lerna.get("packages") if isinstance(lerna, dict) else None
        if packages:
            return [str(p) for p in packages]

    workspaces = root_data.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if workspaces:
        return [str(p) for p in workspaces]

    return list(DEFAULT_PATTERNS)


def expand_patterns(root: Path, patterns: Iterable[str]) -> List[Path]:
    """
    Expand location patterns into sorted, de-duplicated directories.

    Patterns resolving to files are ignored; only directories can hold
    a package.
    """
    found = set()
    for pattern in patterns:
        pattern = pattern.rstrip("/")
        if not pattern:
            continue
        for match in root.glob(pattern):
            if match.is_dir():
                found.add(match.resolve())
    return sorted(found)


def load_package(package_dir: Path) -> Optional[Package]:
    """
    Load one candidate package directory.

    Returns:
        Package, or None if the location is not a workspace package
        (no readable manifest, or the manifest lacks name/version)
    """
    manifest_path = package_dir / MANIFEST_FILENAME
    try:
        data = read_manifest(manifest_path)
        validate_manifest(data)
    except (ManifestReadError, ManifestValidationError) as e:
        logger.debug(f"Skipping {package_dir}: {e}")
        return None
    return Package.from_manifest(manifest_path, data)


def load_root_manifest(root: Path) -> Package:
    """
    Load the workspace root package.json.

    Raises:
        WorkspaceError: If the root manifest is missing or malformed
    """
    manifest_path = root / MANIFEST_FILENAME
    try:
        data = read_manifest(manifest_path)
        validate_root_manifest(data)
    except (ManifestReadError, ManifestValidationError) as e:
        raise WorkspaceError(f"Invalid workspace root {root}: {e}") from e
    return Package.from_manifest(manifest_path, data)


def load_workspace(root: Path, patterns: Optional[Sequence[str]] = None) -> Workspace:
    """
    Load every package of the workspace rooted at root.

    Process:
    1. Load the root package.json
    2. Resolve package location patterns (unless given)
    3. Load each location's package.json, skipping failures
    4. Index packages by name (first location wins on duplicates)

    Args:
        root: Workspace root directory
        patterns: Explicit location patterns, overriding the descriptor

    Returns:
        Workspace with packages in sorted directory order

    Raises:
        WorkspaceError: If the root manifest is missing or invalid

    Example:
        >>> workspace = load_workspace(Path("."))
        >>> workspace.path_of("@org/core")
        PosixPath('/repo/packages/core')
    """
    root = root.resolve()
    root_manifest = load_root_manifest(root)
    if patterns is None:
        patterns = workspace_patterns(root, root_manifest.raw)

    workspace = Workspace(root, root_manifest)
    for package_dir in expand_patterns(root, patterns):
        if package_dir == root:
            continue
        package = load_package(package_dir)
        if package is None:
            continue
        if package.name in workspace:
            logger.warning(
                f"Duplicate package name {package.name!r} at {package_dir}, "
                f"keeping {workspace.path_of(package.name)}"
            )
            continue
        workspace.add(package)

    logger.info(f"Loaded {len(workspace)} packages from {root}")
    return workspace
