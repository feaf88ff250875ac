from __future__ import annotations
"""Filesystem helpers shared by the bootstrap loaders."""
import os
import logging
from typing import List, Optional, Sequence, Set

import aiofiles.os

from plugin_bootstrap.core.config import settings

_log = logging.getLogger(__name__)


def to_posix(rel: str) -> str:
    """Registry keys always use forward slashes, whatever the host separator."""
    return rel.replace('\\', '/')


async def walk_files(
    folder: str | os.PathLike,
    base: str = '',
    *,
    max_depth: Optional[int] = None,
    _visited: Optional[Set[str]] = None,
    _depth: int = 0,
) -> List[str]:
    """Return every file below `folder` relative to it, with '/' separators.

    Directories already entered (by real path) are skipped so symlink cycles
    terminate, and descent stops once `max_depth` levels have been walked.
    """
    if max_depth is None:
        max_depth = settings.walk_max_depth
    visited = _visited if _visited is not None else set()
    real = os.path.realpath(folder)
    if real in visited:
        _log.warning("skipping already visited directory %s", folder)
        return []
    visited.add(real)

    files: List[str] = []
    for name in sorted(await aiofiles.os.listdir(folder)):
        full = os.path.join(folder, name)
        rel = os.path.join(base, name) if base else name
        if await aiofiles.os.path.isdir(full):
            if _depth + 1 > max_depth:
                _log.warning("directory depth limit %d reached at %s", max_depth, full)
                continue
            files.extend(
                await walk_files(full, rel, max_depth=max_depth, _visited=visited, _depth=_depth + 1)
            )
        else:
            files.append(rel)
    return [to_posix(f) for f in files]


async def locate_file(base_path: str | os.PathLike, filenames: Sequence[str]) -> Optional[str]:
    """Return the absolute path of the first candidate that exists, else None."""
    for name in filenames:
        candidate = os.path.abspath(os.path.join(base_path, name))
        if await aiofiles.os.path.exists(candidate):
            return candidate
    return None
