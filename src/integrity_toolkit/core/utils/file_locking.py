"""
Module: core.utils.file_locking

Purpose:
    Cross-platform locked file access for manifest and index rewrites.
    Uses portalocker for Mac, Windows, and Linux compatibility, so an
    editor or a second integrity run never observes a half-written file.

Key Functions:
    - locked_file: Context manager for locked file access
    - write_if_changed: Compare-and-write under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - integrity.validator: Package manifests
    - integrity.aggregator: Aggregator manifest and generated index
    - integrity.hoister: Root manifest
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'r+', 'a', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(path, 'r+') as f:
        ...     f.write('data')
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Ensure file exists for read modes
    if 'r' in mode and not path.exists():
        path.touch()

    # newline='' keeps the on-disk line endings visible to comparisons
    with open(path, mode, encoding='utf-8', newline='') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def write_if_changed(path: Path, text: str, *, dry_run: bool = False) -> bool:
    """
    Write text to path only if it differs from the current contents.

    The read-compare-write happens under one exclusive lock. A missing
    file counts as different and is created (unless dry_run).

    Args:
        path: Target file.
        text: Desired full contents.
        dry_run: Report whether a write is needed without writing.

    Returns:
        True if the on-disk contents differed from text.
    """
    if dry_run:
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                current = f.read()
        except FileNotFoundError:
            return True
        return current != text

    with locked_file(path, 'r+') as f:
        f.seek(0)
        current = f.read()
        if current == text:
            return False
        f.seek(0)
        f.truncate()
        f.write(text)

    logger.debug(f"Wrote {path}")
    return True
