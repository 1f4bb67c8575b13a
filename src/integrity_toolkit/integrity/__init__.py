"""
Module: integrity

Purpose:
    The reconciliation engine. Keeps every package's declared dependencies
    consistent with its imports and with one canonical version per
    dependency, keeps the aggregator package complete, and hoists
    devDependencies into the root manifest.

Key Functions:
    - ensure_integrity(): Run a full pass over a workspace
    - load_config(): Read integrity.json

Key Classes:
    - IntegrityConfig, ExceptionLists, AggregatorSpec: Configuration
    - PackageValidator: Per-package reconciliation
    - AggregatorSynchronizer: Aggregator package maintenance
    - RootHoister: Root devDependency hoisting

Used By:
    - cli
"""

from .config import (
    IntegrityConfig,
    ExceptionLists,
    AggregatorSpec,
    ConfigError,
    load_config,
    CONFIG_FILENAME,
)
from .sources import IntegrityError, find_source_files, read_package_imports
from .aggregator import AggregatorSynchronizer, import_line
from .hoister import RootHoister
from .validator import PackageValidator
from .controller import ensure_integrity

__all__ = [
    # Config
    "IntegrityConfig",
    "ExceptionLists",
    "AggregatorSpec",
    "ConfigError",
    "load_config",
    "CONFIG_FILENAME",
    # Sources
    "IntegrityError",
    "find_source_files",
    "read_package_imports",
    # Passes
    "AggregatorSynchronizer",
    "import_line",
    "RootHoister",
    "PackageValidator",
    # Controller
    "ensure_integrity",
]
