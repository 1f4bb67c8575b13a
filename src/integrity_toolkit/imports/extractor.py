"""
Module: imports.extractor

Purpose:
    Extract module specifiers from TypeScript sources and normalize them
    to package identities.

Key Functions:
    - extract_imports(): Source text -> raw specifiers
    - extract_file_imports(): Same, reading a file
    - package_identity(): Raw specifier -> package name (or None)
    - collect_identities(): Deduplicated identities of many specifiers

Key Classes:
    - ImportCollector: Visitor collecting import specifiers

Dependencies:
    - .syntax: Parser and node types

Used By:
    - integrity.validator: Import collection per package
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .syntax import (
    ExternalModuleReference,
    ImportDeclaration,
    ImportEqualsDeclaration,
    NodeVisitor,
    parse,
)

logger = logging.getLogger(__name__)


class ImportCollector(NodeVisitor):
    """
    Collects the literal specifier of every import declaration and every
    import-equals declaration with an external module reference.

    Example:
        >>> collector = ImportCollector()
        >>> collector.visit(parse('import x = require("y");'))
        >>> collector.specifiers
        ['y']
    """

    def __init__(self) -> None:
        self.specifiers: List[str] = []

    def visit_ImportDeclaration(self, node: ImportDeclaration) -> None:
        self.specifiers.append(node.module_specifier)

    def visit_ImportEqualsDeclaration(self, node: ImportEqualsDeclaration) -> None:
        if isinstance(node.module_reference, ExternalModuleReference):
            self.specifiers.append(node.module_reference.expression)


def extract_imports(source_text: str) -> List[str]:
    """
    Extract raw module specifiers from source text.

    Order is source order; duplicates are kept. Specifiers are returned
    exactly as written, without resolution.

    Example:
        >>> extract_imports('import a from "lodash/fp";\\nimport "./util";')
        ['lodash/fp', './util']
    """
    collector = ImportCollector()
    collector.visit(parse(source_text))
    return collector.specifiers


def extract_file_imports(path: Path) -> List[str]:
    """
    Extract raw module specifiers from a source file.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not UTF-8
    """
    specifiers = extract_imports(path.read_text(encoding="utf-8"))
    logger.debug(f"{path.name}: {len(specifiers)} imports")
    return specifiers


def package_identity(specifier: str) -> Optional[str]:
    """
    Normalize a specifier to the package it refers to.

    - `@scope/name/sub/path` -> `@scope/name`
    - `name/sub/path` -> `name`
    - `.`, `..`, `./x`, `../x`, `/x`, `` -> None (files, not packages)

    Example:
        >>> package_identity("@org/core/lib/tokens")
        '@org/core'
        >>> package_identity("../local") is None
        True
    """
    if not specifier or specifier.startswith((".", "/")):
        return None
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return f"{parts[0]}/{parts[1]}"
    return parts[0]


def collect_identities(specifiers: Iterable[str]) -> Set[str]:
    """Deduplicated package identities of specifiers, relative ones dropped."""
    identities = set()
    for specifier in set(specifiers):
        identity = package_identity(specifier)
        if identity is not None:
            identities.add(identity)
    return identities
