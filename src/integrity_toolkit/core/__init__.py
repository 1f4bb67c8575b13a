"""
Integrity Toolkit Core Package

Shared data models, JSON schemas and manifest utilities used by every
other subpackage.

**CONVENTIONS:**

1. **Canonical Manifest Text**
   - Manifests are compared and written in one canonical form
     (fixed key order, sorted dependency maps, 2-space JSON)
   - A file is rewritten only when that text differs from disk

2. **Schema-Checked Inputs**
   - package.json files and the integrity.json configuration are
     validated with JSON Schema before use
"""

from .models import Package, Workspace, Finding, FindingKind, IntegrityReport

__all__ = [
    "Package",
    "Workspace",
    "Finding",
    "FindingKind",
    "IntegrityReport",
]
