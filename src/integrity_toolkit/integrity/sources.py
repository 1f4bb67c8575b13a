"""
Module: integrity.sources

Purpose:
    Locate a package's source files and turn them into the set of package
    identities the package imports.
    An import of the package's own name (a self-reference) is dropped:
    a package never depends on itself, so it is neither missing nor used.

Key Functions:
    - find_source_files(): Glob source files under a package
    - read_package_imports(): Identities imported by a set of files

Key Classes:
    - IntegrityError: Unreadable source or generated file

Dependencies:
    - imports: Extraction and identity normalization

Used By:
    - integrity.validator
    - integrity.aggregator (IntegrityError)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Set

from integrity_toolkit.core.models import Package
from integrity_toolkit.imports import extract_file_imports, extract_imports, collect_identities

logger = logging.getLogger(__name__)


class IntegrityError(Exception):
    """A file needed by the integrity pass could not be read."""
    pass


def find_source_files(package: Package, patterns: Iterable[str]) -> List[Path]:
    """
    Source files of a package, sorted and de-duplicated.

    Args:
        package: Package whose directory is searched
        patterns: Globs relative to the package directory (e.g. "src/**/*.ts*")

    Returns:
        Sorted list of file paths
    """
    found = set()
    for pattern in patterns:
        for match in package.path.glob(pattern):
            if match.is_file():
                found.add(match)
    return sorted(found)


def read_package_imports(
    package: Package,
    files: Iterable[Path],
    sources: Iterable[str] = (),
) -> Set[str]:
    """
    Package identities imported by files (and by in-memory sources).

    Relative imports and self-references to the package's own name are
    dropped.

    Args:
        package: Package the files belong to
        files: Source files to read
        sources: Additional source texts not (yet) on disk

    Raises:
        IntegrityError: If a file cannot be read or decoded
    """
    specifiers: List[str] = []
    for path in files:
        try:
            specifiers.extend(extract_file_imports(path))
        except (OSError, UnicodeDecodeError) as e:
            raise IntegrityError(f"Cannot read source file {path}: {e}") from e
    for text in sources:
        specifiers.extend(extract_imports(text))

    identities = collect_identities(specifiers)
    # Self-references
    identities.discard(package.name)
    return identities
