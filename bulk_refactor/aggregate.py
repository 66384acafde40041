from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .tools.scanner import FileScanOutcome, ScanError

"""
Aggregator: fan-in of scan outcomes delivered by worker threads.
"""


@dataclass(frozen=True)
class AggregateResult:
    """Frozen view of every file with findings, in arrival order."""
    outcomes: Tuple[FileScanOutcome, ...] = field(default_factory=tuple)
    errors: Tuple[ScanError, ...] = field(default_factory=tuple)

    @property
    def files(self) -> Tuple[str, ...]:
        """The modify set: each path with findings, exactly once."""
        return tuple(o.path for o in self.outcomes)

    @property
    def total_occurrences(self) -> int:
        return sum(o.occurrences for o in self.outcomes)

    @property
    def total_findings(self) -> int:
        return sum(len(o.findings) for o in self.outcomes)

    @property
    def is_empty(self) -> bool:
        return not self.outcomes

    def sorted_outcomes(self) -> List[FileScanOutcome]:
        return sorted(self.outcomes, key=lambda o: o.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": len(self.outcomes),
            "occurrences": self.total_occurrences,
            "matches": [
                {
                    "path": o.path,
                    "line": f.line_number,
                    "occurrences": f.occurrence_count,
                    "text": f.line_text,
                }
                for o in self.sorted_outcomes()
                for f in o.findings
            ],
            "errors": [{"path": e.path, "error": e.error} for e in self.errors],
        }


class Aggregator:
    def __init__(self):
        self._lock = threading.Lock()
        self._outcomes: List[FileScanOutcome] = []
        self._seen: set[str] = set()
        self._errors: List[ScanError] = []
        self._frozen = False

    def add(self, outcome: FileScanOutcome) -> bool:
        """Record an outcome; returns False when it was dropped."""
        if not outcome.findings:
            return False
        with self._lock:
            if self._frozen:
                raise RuntimeError("aggregate already frozen")
            # explicit file lists may name a path twice
            if outcome.path in self._seen:
                return False
            self._seen.add(outcome.path)
            self._outcomes.append(outcome)
            return True

    def add_error(self, error: ScanError) -> None:
        with self._lock:
            self._errors.append(error)

    def freeze(self) -> AggregateResult:
        with self._lock:
            self._frozen = True
            return AggregateResult(outcomes=tuple(self._outcomes), errors=tuple(self._errors))
