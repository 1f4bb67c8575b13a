"""
Module: registry

Purpose:
    Workspace discovery and manifest loading. Builds the Workspace that
    every later stage of the integrity pass reads and mutates.

Key Functions:
    - load_workspace(): Load all packages for a workspace root
    - load_package(): Load a single package directory
    - workspace_patterns(): Package location patterns

Used By:
    - integrity.controller: Load phase
"""

from .loader import (
    load_workspace,
    load_package,
    load_root_manifest,
    workspace_patterns,
    expand_patterns,
    WorkspaceError,
)

__all__ = [
    "load_workspace",
    "load_package",
    "load_root_manifest",
    "workspace_patterns",
    "expand_patterns",
    "WorkspaceError",
]
