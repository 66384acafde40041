from __future__ import annotations
import logging
import os
from typing import Callable, Iterable, List, Optional

"""
FileLister: produce the candidate paths for a run.
Explicit paths are passed through untouched; otherwise the tree under root
is walked without following directory symlinks.
"""

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, OSError], None]


def list_candidates(paths: Optional[Iterable[str]] = None, root: str = ".",
                    exclude: Iterable[str] = (),
                    on_error: Optional[ErrorCallback] = None) -> List[str]:
    if paths:
        return list(paths)
    return walk_files(root, exclude=exclude, on_error=on_error)


def walk_files(root: str = ".", exclude: Iterable[str] = (),
               on_error: Optional[ErrorCallback] = None) -> List[str]:
    skip = set(exclude)

    def _onerror(err: OSError) -> None:
        path = err.filename or root
        logger.warning("walk: skipping %s: %s", path, err)
        if on_error:
            on_error(path, err)

    files: List[str] = []
    for current, dirs, names in os.walk(root, onerror=_onerror, followlinks=False):
        # prune in place so os.walk never descends into them
        dirs[:] = [d for d in dirs if d not in skip]
        for name in names:
            files.append(os.path.normpath(os.path.join(current, name)))
    logger.debug("walk: %d candidate files under %s", len(files), root)
    return files
