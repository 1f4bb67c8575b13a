"""
Schema Validation Utilities

Validates package manifests and the integrity configuration against the
JSON Schema files shipped next to this module.

- `validate_manifest()`: workspace package.json (name + version required)
- `validate_root_manifest()`: top-level package.json
- `validate_config()`: integrity.json configuration
- Fail fast on any schema violation
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


class ManifestValidationError(ValidationError):
    """Raised when a package.json does not describe a workspace package."""


def _validate(data: Any, schema_name: str, error_cls: type[ValidationError]) -> None:
    schema = _load_schema(schema_name)
    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        first = errors[0]
        raise error_cls(
            f"Schema validation failed: {first.message}",
            path=".".join(str(p) for p in first.absolute_path),
            errors=[e.message for e in errors],
        )


def validate_manifest(data: Any) -> None:
    """
    Validate a workspace package manifest.

    Args:
        data: Parsed package.json contents

    Raises:
        ManifestValidationError: If data is not a valid package manifest
    """
    _validate(data, "manifest", ManifestValidationError)


def validate_root_manifest(data: Any) -> None:
    """
    Validate the workspace root package.json.

    Raises:
        ManifestValidationError: If the root manifest is malformed
    """
    _validate(data, "root_manifest", ManifestValidationError)


def validate_config(data: Any) -> None:
    """
    Validate integrity.json configuration data.

    Raises:
        ValidationError: If data violates the configuration schema
    """
    _validate(data, "integrity_config", ValidationError)
