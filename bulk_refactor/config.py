from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

# Maximum number of file operations in flight at once (scan and rewrite).
DEFAULT_MAX_WORKERS = 50

ENCODING = "utf-8"


class NoopError(ValueError):
    """Old and new text are identical; there is nothing to replace."""


@dataclass(frozen=True)
class SearchSpec:
    old_text: str
    new_text: str
    commit: bool = False

    def validate(self) -> None:
        if self.old_text == self.new_text:
            raise NoopError("noop (A == B)")
        if not self.old_text:
            raise ValueError("old text must not be empty")

    @property
    def old_bytes(self) -> bytes:
        return self.old_text.encode(ENCODING, "surrogateescape")

    @property
    def new_bytes(self) -> bytes:
        return self.new_text.encode(ENCODING, "surrogateescape")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RunConfig:
    root: str = "."
    max_workers: int = DEFAULT_MAX_WORKERS
    exclude: Tuple[str, ...] = field(default_factory=tuple)
    log_file: Optional[str] = None
    debug: bool = False

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @classmethod
    def from_env(cls) -> "RunConfig":
        """Build a config from REFACTOR_* environment variables."""
        workers = os.environ.get("REFACTOR_MAX_WORKERS")
        exclude = os.environ.get("REFACTOR_EXCLUDE", "")
        return cls(
            max_workers=int(workers) if workers else DEFAULT_MAX_WORKERS,
            exclude=tuple(e.strip() for e in exclude.split(",") if e.strip()),
            log_file=os.environ.get("REFACTOR_LOG_FILE") or None,
            debug=_env_flag("REFACTOR_DEBUG"),
        )
