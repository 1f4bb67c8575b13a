"""
Module: resolution.cache

Purpose:
    Per-run memo of canonical dependency version specs. Once a name is
    resolved, every package in the run receives the identical spec string
    for it. The cache is created at run start and passed explicitly to the
    resolver; it is never a process-wide singleton.

Key Classes:
    - DependencyCache: Monotonic name -> spec mapping

Dependencies:
    - threading (std): Guards concurrent access

Used By:
    - resolution.resolver.DependencyResolver
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)


class DependencyCache:
    """
    Monotonically populated map of canonical version specs.

    Entries are only ever added. Setting a different spec for a name that
    is already cached is a programming error and raises, since it would
    break the one-spec-per-name guarantee.

    Example:
        >>> cache = DependencyCache()
        >>> cache.set("lodash", "~4.17.21")
        >>> cache.get("lodash")
        '~4.17.21'
    """

    def __init__(self) -> None:
        self._specs: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[str]:
        """Cached spec for name, or None."""
        with self._lock:
            return self._specs.get(name)

    def set(self, name: str, spec: str) -> None:
        """
        Record the canonical spec for name.

        Raises:
            ValueError: If name is already cached with a different spec
        """
        with self._lock:
            existing = self._specs.get(name)
            if existing is not None and existing != spec:
                raise ValueError(
                    f"Conflicting spec for {name}: cached {existing!r}, got {spec!r}"
                )
            self._specs[name] = spec
        logger.debug(f"Cache SET: {name} -> {spec}")

    def snapshot(self) -> Dict[str, str]:
        """Copy of all cached entries."""
        with self._lock:
            return dict(self._specs)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._specs

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._specs)
