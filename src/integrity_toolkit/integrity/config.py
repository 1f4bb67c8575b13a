"""
Module: integrity.config

Purpose:
    Configuration dataclasses for the integrity pass. Immutable settings
    for source discovery, the aggregator package, exception lists and
    version policy, plus loading from an integrity.json file.

Key Classes:
    - IntegrityConfig: Main configuration for a run
    - ExceptionLists: Per-package names to ignore as missing/unused
    - AggregatorSpec: Which package re-exports the whole workspace

Key Functions:
    - load_config(): Read and validate integrity.json

Dependencies:
    - dataclasses (std)
    - core.schemas.validator: JSON Schema validation

Used By:
    - integrity.controller: Run configuration
    - integrity.validator: Exception lists and source patterns
    - cli: Flag overrides
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional, Tuple

from integrity_toolkit.core.schemas import validate_config, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "integrity.json"
DEFAULT_SOURCE_PATTERNS: Tuple[str, ...] = ("src/**/*.ts*",)


class ConfigError(Exception):
    """Raised when the integrity configuration cannot be loaded."""


def _freeze_table(table: Optional[Mapping[str, Any]]) -> Mapping[str, FrozenSet[str]]:
    return {name: frozenset(deps) for name, deps in (table or {}).items()}


@dataclass(frozen=True)
class ExceptionLists:
    """
    Dependency names the import scan cannot or should not see.

    Attributes:
        missing: package name -> names never reported as missing
            (e.g. ambient type-only imports)
        unused: package name -> names never reported or removed as unused
            (e.g. dependencies consumed only for a runtime side effect)

    Example:
        >>> lists = ExceptionLists.from_tables(unused={"@org/theme": ["font-awesome"]})
        >>> lists.ignores_unused("@org/theme", "font-awesome")
        True
    """
    missing: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    unused: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    @classmethod
    def from_tables(
        cls,
        missing: Optional[Mapping[str, Any]] = None,
        unused: Optional[Mapping[str, Any]] = None,
    ) -> "ExceptionLists":
        return cls(missing=_freeze_table(missing), unused=_freeze_table(unused))

    def ignores_missing(self, package: str, dependency: str) -> bool:
        return dependency in self.missing.get(package, ())

    def ignores_unused(self, package: str, dependency: str) -> bool:
        return dependency in self.unused.get(package, ())


@dataclass(frozen=True)
class AggregatorSpec:
    """
    The distinguished package that depends on and imports every other one.

    Attributes:
        package: Package name of the aggregator
        index: Generated index source, relative to the package directory
        header_lines: Leading lines of the index preserved untouched
    """
    package: str
    index: str = "src/index.ts"
    header_lines: int = 3

    def __post_init__(self) -> None:
        if self.header_lines < 0:
            raise ValueError(f"header_lines must be non-negative: {self.header_lines}")


@dataclass(frozen=True)
class IntegrityConfig:
    """
    Configuration for one integrity run (immutable).

    Attributes:
        source_patterns: Globs (relative to each package) selecting source files
        aggregator: Aggregator package spec, or None if the workspace has none
        exceptions: Missing/unused exception lists
        versions: Policy table of canonical specs, consulted before the workspace
        use_registry: Fall back to `npm view` for names nothing else resolves
        jobs: Worker threads for import extraction (1 = sequential)
        dry_run: Report findings without writing any file

    Example:
        >>> config = IntegrityConfig(
        ...     aggregator=AggregatorSpec("@org/all-packages"),
        ...     versions={"typescript": "~4.1.3"},
        ... )
    """
    source_patterns: Tuple[str, ...] = DEFAULT_SOURCE_PATTERNS
    aggregator: Optional[AggregatorSpec] = None
    exceptions: ExceptionLists = field(default_factory=ExceptionLists)
    versions: Mapping[str, str] = field(default_factory=dict)
    use_registry: bool = False
    jobs: int = 1
    dry_run: bool = False

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1: {self.jobs}")
        if not self.source_patterns:
            raise ValueError("source_patterns must not be empty")

    def is_aggregator(self, package_name: str) -> bool:
        return self.aggregator is not None and self.aggregator.package == package_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IntegrityConfig":
        """
        Build a config from integrity.json data (camelCase keys).

        Raises:
            ConfigError: If data violates the configuration schema
        """
        try:
            validate_config(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid integrity configuration at '{e.path}': {e}") from e

        aggregator = None
        agg_data = data.get("aggregator")
        if agg_data:
            aggregator = AggregatorSpec(
                package=agg_data["package"],
                index=agg_data.get("index", "src/index.ts"),
                header_lines=agg_data.get("headerLines", 3),
            )

        return cls(
            source_patterns=tuple(data.get("sourcePatterns", DEFAULT_SOURCE_PATTERNS)),
            aggregator=aggregator,
            exceptions=ExceptionLists.from_tables(data.get("missing"), data.get("unused")),
            versions=dict(data.get("versions", {})),
            use_registry=data.get("useRegistry", False),
            jobs=data.get("jobs", 1),
        )


def load_config(path: Path, *, required: bool = False) -> IntegrityConfig:
    """
    Load configuration from an integrity.json file.

    Args:
        path: Path to the configuration file
        required: If False, a missing file yields the default configuration

    Returns:
        Parsed IntegrityConfig

    Raises:
        ConfigError: If the file is unreadable, not JSON, or schema-invalid
    """
    if not path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {path}")
        logger.debug(f"No configuration at {path}, using defaults")
        return IntegrityConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read configuration {path}: {e}") from e

    config = IntegrityConfig.from_dict(data)
    logger.debug(f"Loaded configuration from {path}")
    return config
