"""
Module: findings

Purpose:
    Consistency findings and the per-run report. A finding is not an error:
    it records a deviation the engine already corrected in memory (and on
    disk). Any finding makes the run fail because the on-disk state before
    the run did not match the reconciled state.

Key Classes:
    - FindingKind: Category of correction
    - Finding: One correction, rendered as a human-readable message
    - IntegrityReport: Findings grouped by package name

Dependencies:
    - dataclasses, enum, json (std)

Used By:
    - integrity.validator, integrity.aggregator, integrity.hoister
    - integrity.controller, cli
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

TOP_KEY = "top"


class FindingKind(str, Enum):
    """Category of a consistency finding."""
    MISSING = "missing"                       # Imported but not declared
    UNUSED = "unused"                         # Declared but never imported
    UPDATED = "updated"                       # Aggregator entry added/refreshed
    PACKAGE_DATA_CHANGED = "package_data_changed"
    INDEX_CHANGED = "index_changed"
    ROOT_UPDATED = "root_updated"

    def __str__(self) -> str:
        return self.value


_TEMPLATES = {
    FindingKind.MISSING: "Missing dependency: {subject}",
    FindingKind.UNUSED: "Unused dependency: {subject}",
    FindingKind.UPDATED: "Updated: {subject}",
    FindingKind.PACKAGE_DATA_CHANGED: "Package data changed",
    FindingKind.INDEX_CHANGED: "Index changed",
    FindingKind.ROOT_UPDATED: "updated",
}


@dataclass(frozen=True, slots=True)
class Finding:
    """
    A single corrected deviation.

    Attributes:
        kind: Category of the finding
        subject: Dependency or package name the finding is about (if any)

    Example:
        >>> Finding.missing("lodash").message
        'Missing dependency: lodash'
    """
    kind: FindingKind
    subject: Optional[str] = None

    @property
    def message(self) -> str:
        """Human-readable message."""
        return _TEMPLATES[self.kind].format(subject=self.subject)

    @classmethod
    def missing(cls, name: str) -> "Finding":
        return cls(FindingKind.MISSING, name)

    @classmethod
    def unused(cls, name: str) -> "Finding":
        return cls(FindingKind.UNUSED, name)

    @classmethod
    def updated(cls, name: str) -> "Finding":
        return cls(FindingKind.UPDATED, name)

    def __str__(self) -> str:
        return self.message


@dataclass
class IntegrityReport:
    """
    Findings of one run grouped by package name.

    Only packages with at least one finding are recorded. Root manifest
    findings are stored under the ``"top"`` key.

    Example:
        >>> report = IntegrityReport()
        >>> report.add("a", [Finding.missing("lodash")])
        >>> report.to_dict()
        {'a': ['Missing dependency: lodash']}
    """
    findings: Dict[str, List[Finding]] = field(default_factory=dict)

    def add(self, name: str, findings: Iterable[Finding]) -> None:
        """Record findings for a package, ignoring empty lists."""
        items = list(findings)
        if items:
            self.findings.setdefault(name, []).extend(items)

    @property
    def ok(self) -> bool:
        """True if the run produced no findings."""
        return not self.findings

    def messages(self, name: str) -> List[str]:
        """Rendered messages for one package (empty if none)."""
        return [f.message for f in self.findings.get(name, [])]

    def to_dict(self) -> Dict[str, List[str]]:
        """Mapping package name -> list of messages."""
        return {name: [f.message for f in items] for name, items in self.findings.items()}

    def to_json(self) -> str:
        """JSON rendering of :meth:`to_dict` (2-space indent)."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def __len__(self) -> int:
        return sum(len(items) for items in self.findings.values())
