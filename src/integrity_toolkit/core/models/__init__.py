"""
Core Models Package

Data models shared by every stage of the integrity pass.

**DESIGN RATIONALE:**

Findings are frozen dataclasses, safe to collect and compare. Package
records are deliberately mutable: reconciliation rewrites dependency maps
in place and the serializer decides whether anything actually changed.

| Model | Role |
|-------|------|
| `Package` | One package.json, mutated by reconciliation |
| `Workspace` | All packages of a run, indexed by name and path |
| `Finding` | One corrected deviation |
| `IntegrityReport` | Findings grouped by package |
"""

from .package import Package
from .workspace import Workspace
from .findings import Finding, FindingKind, IntegrityReport, TOP_KEY

__all__ = [
    "Package",
    "Workspace",
    "Finding",
    "FindingKind",
    "IntegrityReport",
    "TOP_KEY",
]
