"""
Utils Package

Manifest serialization and locked file writes.
"""

from .serialization import (
    canonical_manifest_text,
    sort_manifest,
    read_manifest,
    ManifestReadError,
)
from .file_locking import locked_file, write_if_changed

__all__ = [
    "canonical_manifest_text",
    "sort_manifest",
    "read_manifest",
    "ManifestReadError",
    "locked_file",
    "write_if_changed",
]
