from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional

from ..config import SearchSpec
from .scanner import O_BINARY, O_NOFOLLOW

"""
Rewriter: apply the replacements counted during the scan to one file.
The file is reopened without following symlinks and without O_CREAT, so a
path that disappeared after the scan is reported instead of recreated.
Truncating the existing inode leaves its permission bits untouched.
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteOutcome:
    path: str
    success: bool
    error: Optional[str] = None
    replaced: int = 0


class ContentChanged(Exception):
    """The file no longer holds the number of occurrences seen by the scan."""


def _read(path: str) -> bytes:
    with os.fdopen(os.open(path, os.O_RDONLY | O_NOFOLLOW | O_BINARY), "rb") as f:
        return f.read()


def _write(path: str, data: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_TRUNC | O_NOFOLLOW | O_BINARY)
    with os.fdopen(fd, "wb") as f:
        f.write(data)


def replace_bounded(content: bytes, old: bytes, new: bytes, expected: int) -> bytes:
    """Replace exactly `expected` occurrences of old, or raise ContentChanged."""
    found = content.count(old)
    if found != expected:
        raise ContentChanged(f"changed since scan: expected {expected} occurrences, found {found}")
    return content.replace(old, new, expected)


def rewrite_file(path: str, occurrences: int, spec: SearchSpec) -> RewriteOutcome:
    try:
        content = _read(path)
    except OSError as e:
        logger.warning("read %s: %s", path, e)
        return RewriteOutcome(path, False, f"read: {e.strerror or e}")

    try:
        updated = replace_bounded(content, spec.old_bytes, spec.new_bytes, occurrences)
    except ContentChanged as e:
        logger.warning("%s: %s", path, e)
        return RewriteOutcome(path, False, str(e))

    try:
        _write(path, updated)
    except OSError as e:
        logger.error("write %s: %s", path, e)
        return RewriteOutcome(path, False, f"write: {e.strerror or e}")

    logger.debug("rewrote %s (%d replacements)", path, occurrences)
    return RewriteOutcome(path, True, replaced=occurrences)
