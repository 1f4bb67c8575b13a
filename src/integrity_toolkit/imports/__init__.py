"""
Module: imports

Purpose:
    Import extraction from TypeScript sources: tokenizer, a minimal syntax
    tree of import-related statements, and a visitor collecting module
    specifiers.

Key Functions:
    - extract_imports(): Source text -> raw specifiers
    - extract_file_imports(): File -> raw specifiers
    - package_identity(): Specifier -> package name
    - collect_identities(): Specifiers -> set of package names

Used By:
    - integrity.validator
"""

from .extractor import (
    ImportCollector,
    extract_imports,
    extract_file_imports,
    package_identity,
    collect_identities,
)
from .syntax import parse, NodeVisitor

__all__ = [
    "ImportCollector",
    "extract_imports",
    "extract_file_imports",
    "package_identity",
    "collect_identities",
    "parse",
    "NodeVisitor",
]
