"""
Module: resolution.resolver

Purpose:
    Canonical version resolution with memoization. The first request for a
    name consults the lookup collaborator; every later request in the run
    is answered from the DependencyCache without re-querying.

Key Classes:
    - DependencyResolver: resolve(name) -> canonical spec
    - ResolutionError: Fatal failure to resolve a name

Dependencies:
    - threading (std): Serializes cache misses
    - .cache.DependencyCache
    - .lookups: Lookup collaborators

Used By:
    - integrity.validator: Version normalization and missing dependencies
    - integrity.controller: Resolution pass
"""

from __future__ import annotations

import logging
import threading

from .cache import DependencyCache
from .lookups import VersionLookup

logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    """
    No canonical version could be found for a dependency.

    Fatal for the run: there is no safe spec to assign, and skipping
    would leave the workspace inconsistent.
    """

    def __init__(self, name: str):
        super().__init__(f"Cannot resolve a version for dependency: {name}")
        self.name = name


class DependencyResolver:
    """
    Resolve dependency names to canonical version specs.

    Cache misses are serialized with a lock, so two threads resolving the
    same new name can never store different specs.

    Attributes:
        cache: The run's DependencyCache
        lookups_made: Number of times the lookup collaborator was consulted

    Example:
        >>> resolver = DependencyResolver(PolicyLookup({"lodash": "~4.17.21"}))
        >>> resolver.resolve("lodash")
        '~4.17.21'
    """

    def __init__(self, lookup: VersionLookup, cache: DependencyCache | None = None):
        self._lookup = lookup
        self.cache = cache if cache is not None else DependencyCache()
        self._miss_lock = threading.Lock()
        self.lookups_made = 0

    def resolve(self, name: str) -> str:
        """
        Canonical spec for name.

        Raises:
            ResolutionError: If the lookup cannot resolve the name
        """
        spec = self.cache.get(name)
        if spec is not None:
            return spec

        with self._miss_lock:
            # Another thread may have resolved it while we waited
            spec = self.cache.get(name)
            if spec is not None:
                return spec

            self.lookups_made += 1
            spec = self._lookup(name)
            if spec is None:
                raise ResolutionError(name)
            self.cache.set(name, spec)

        logger.debug(f"Resolved {name} -> {spec}")
        return spec
