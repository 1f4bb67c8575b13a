"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_manifest,
    validate_root_manifest,
    validate_config,
    ValidationError,
    ManifestValidationError,
)

__all__ = [
    "validate_manifest",
    "validate_root_manifest",
    "validate_config",
    "ValidationError",
    "ManifestValidationError",
]
