"""
Module: resolution

Purpose:
    Canonical dependency version resolution. One spec per dependency name
    across the whole workspace, memoized for the duration of a run.

Key Classes:
    - DependencyResolver: Memoizing resolver
    - DependencyCache: Per-run cache
    - PolicyLookup, WorkspaceLookup, NpmViewLookup, ChainedLookup: Lookups

Used By:
    - integrity.validator
    - integrity.controller
"""

from .cache import DependencyCache
from .lookups import (
    VersionLookup,
    PolicyLookup,
    WorkspaceLookup,
    NpmViewLookup,
    ChainedLookup,
    build_lookup,
)
from .resolver import DependencyResolver, ResolutionError

__all__ = [
    "DependencyCache",
    "VersionLookup",
    "PolicyLookup",
    "WorkspaceLookup",
    "NpmViewLookup",
    "ChainedLookup",
    "build_lookup",
    "DependencyResolver",
    "ResolutionError",
]
