"""
Manifest Serialization Utilities

Provides the canonical on-disk text form of a package.json and the
matching reader.

- Well-known keys are emitted in a fixed, conventional order
- Unknown keys follow in their original order
- Dependency maps are sorted by name
- 2-space JSON with a trailing newline, non-ASCII preserved

Two manifests with the same content always serialize to the same text, so
comparing text against disk is enough to decide whether to write.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


# Conventional package.json key order (subset of the sort-package-json order).
MANIFEST_KEY_ORDER: tuple[str, ...] = (
    "$schema",
    "name",
    "displayName",
    "version",
    "private",
    "description",
    "keywords",
    "homepage",
    "bugs",
    "repository",
    "funding",
    "license",
    "author",
    "maintainers",
    "contributors",
    "sideEffects",
    "type",
    "imports",
    "exports",
    "main",
    "module",
    "browser",
    "types",
    "typings",
    "style",
    "bin",
    "man",
    "directories",
    "files",
    "workspaces",
    "scripts",
    "config",
    "resolutions",
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "peerDependenciesMeta",
    "optionalDependencies",
    "bundledDependencies",
    "bundleDependencies",
    "packageManager",
    "engines",
    "os",
    "cpu",
    "publishConfig",
)

SORTED_MAP_KEYS = frozenset({
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "peerDependenciesMeta",
    "optionalDependencies",
    "resolutions",
    "engines",
})


class ManifestReadError(Exception):
    """Raised when a manifest file cannot be read or parsed."""


def sort_manifest(data: dict[str, Any]) -> dict[str, Any]:
    """
    Return a new mapping in canonical key order.

    Args:
        data: Manifest mapping

    Returns:
        New dict; nested dependency maps are sorted by name
    """
    ordered: dict[str, Any] = {}
    for key in MANIFEST_KEY_ORDER:
        if key in data:
            ordered[key] = data[key]
    for key, value in data.items():
        if key not in ordered:
            ordered[key] = value

    for key in SORTED_MAP_KEYS:
        value = ordered.get(key)
        if isinstance(value, dict):
            ordered[key] = {name: value[name] for name in sorted(value)}
    return ordered


def canonical_manifest_text(data: dict[str, Any]) -> str:
    """
    Serialize a manifest to its canonical on-disk text.

    Example:
        >>> canonical_manifest_text({"version": "1.0.0", "name": "a"})
        '{\\n  "name": "a",\\n  "version": "1.0.0"\\n}\\n'
    """
    return json.dumps(sort_manifest(data), indent=2, ensure_ascii=False) + "\n"


def read_manifest(path: Path) -> dict[str, Any]:
    """
    Read and parse a package.json.

    Args:
        path: Path to the manifest file

    Returns:
        Parsed JSON object

    Raises:
        ManifestReadError: If the file is missing, unreadable, not JSON
            or not a JSON object
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestReadError(f"Cannot read manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestReadError(f"Manifest must be a JSON object: {path}")
    return data
