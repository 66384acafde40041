from __future__ import annotations
import logging
import os
import stat
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from ..config import ENCODING, SearchSpec

"""
Scanner: find every line of one file that contains the search text.
Files are read as bytes, one line at a time, so large files never need to
fit in memory during the scan.
"""

logger = logging.getLogger(__name__)

# Refuse to open through a symlink swapped in after lstat.
O_NOFOLLOW = getattr(os, "O_NOFOLLOW", 0)
O_BINARY = getattr(os, "O_BINARY", 0)


@dataclass(frozen=True)
class Finding:
    """One matching line: 1-based number, occurrence count, original text."""
    line_number: int
    occurrence_count: int
    line_text: str

    @property
    def line_bytes(self) -> bytes:
        return self.line_text.encode(ENCODING, "surrogateescape")


@dataclass(frozen=True)
class FileScanOutcome:
    path: str
    findings: Tuple[Finding, ...] = field(default_factory=tuple)

    @property
    def occurrences(self) -> int:
        return sum(f.occurrence_count for f in self.findings)


@dataclass(frozen=True)
class ScanError:
    path: str
    error: str


@dataclass(frozen=True)
class ScanSkipped:
    path: str
    reason: str


ScanResult = Union[FileScanOutcome, ScanError, ScanSkipped]


def _strip_terminator(raw: bytes) -> bytes:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    # a final unterminated line may still end in \r
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw


def scan_lines(lines, needle: bytes) -> List[Finding]:
    """Return findings for an iterable of raw byte lines (terminators allowed)."""
    findings: List[Finding] = []
    for row, raw in enumerate(lines, 1):
        line = _strip_terminator(raw)
        n = line.count(needle)
        if n > 0:
            findings.append(Finding(
                line_number=row,
                occurrence_count=n,
                line_text=line.decode(ENCODING, "surrogateescape"),
            ))
    return findings


def scan_file(path: str, spec: SearchSpec) -> ScanResult:
    try:
        st = os.lstat(path)
    except OSError as e:
        logger.warning("lstat %s: %s", path, e)
        return ScanError(path, f"lstat: {e.strerror or e}")

    # symlinks are never read: they would double-count their target
    if stat.S_ISLNK(st.st_mode):
        logger.debug("skipping symlink %s", path)
        return ScanSkipped(path, "symbolic link")
    if not stat.S_ISREG(st.st_mode):
        logger.warning("skipping %s: not a regular file", path)
        return ScanError(path, "not a regular file")

    try:
        f = os.fdopen(os.open(path, os.O_RDONLY | O_NOFOLLOW | O_BINARY), "rb")
    except OSError as e:
        logger.warning("open %s: %s", path, e)
        return ScanError(path, f"open: {e.strerror or e}")

    with f:
        try:
            findings = scan_lines(f, spec.old_bytes)
        except OSError as e:
            logger.warning("read %s: %s", path, e)
            return ScanError(path, f"read: {e.strerror or e}")

    return FileScanOutcome(path=path, findings=tuple(findings))
