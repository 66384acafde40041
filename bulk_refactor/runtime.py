from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .aggregate import AggregateResult, Aggregator
from .config import NoopError, RunConfig, SearchSpec
from .gate import Reader, confirm
from .report import Reporter, label_width
from .tools.lister import list_candidates
from .tools.rewriter import RewriteOutcome, rewrite_file
from .tools.scanner import FileScanOutcome, ScanError, scan_file

"""
Scan-then-modify pipeline.

  IDLE -> SCANNING -> AGGREGATING -> PREVIEWING -> DONE            (preview)
                                               -> AWAITING_CONFIRMATION
                                                  -> CANCELLED
                                                  -> REWRITING -> DONE

One thread pool is shared by the scan and rewrite phases; its size is the
admission limit for open files.
"""

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    AGGREGATING = "aggregating"
    PREVIEWING = "previewing"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    REWRITING = "rewriting"
    DONE = "done"
    CANCELLED = "cancelled"


class RunStatus(Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NOOP = "noop"
    NOTHING_TO_DO = "nothing_to_do"

    @property
    def exit_code(self) -> int:
        return 1 if self in (RunStatus.NOOP, RunStatus.NOTHING_TO_DO) else 0


@dataclass
class RunReport:
    status: RunStatus
    result: AggregateResult = field(default_factory=AggregateResult)
    rewrites: List[RewriteOutcome] = field(default_factory=list)


class Refactor:
    def __init__(self, spec: SearchSpec, config: Optional[RunConfig] = None,
                 reporter: Optional[Reporter] = None, reader: Optional[Reader] = None,
                 json_output: bool = False):
        self.spec = spec
        self.config = config or RunConfig()
        self.reporter = reporter or Reporter()
        self.reader: Reader = reader or self.reporter.console.input
        self.json_output = json_output
        self.state = RunState.IDLE

    def _transition(self, state: RunState) -> None:
        logger.debug("state %s -> %s", self.state.value, state.value)
        self.state = state

    # ---------- phases ----------
    def candidates(self, paths: Optional[Sequence[str]] = None) -> List[str]:
        return list_candidates(paths, root=self.config.root, exclude=self.config.exclude,
                               on_error=lambda p, e: self.reporter.error(p, f"walk: {e.strerror or e}"))

    def scan(self, pool: ThreadPoolExecutor, candidates: Iterable[str]) -> AggregateResult:
        self._transition(RunState.SCANNING)
        aggregator = Aggregator()

        def _work(path: str) -> None:
            res = scan_file(path, self.spec)
            if isinstance(res, FileScanOutcome):
                aggregator.add(res)
            elif isinstance(res, ScanError):
                aggregator.add_error(res)
                self.reporter.error(res.path, res.error)

        futures = {pool.submit(_work, path): path for path in candidates}
        # fan-in barrier: nothing downstream starts before every scan is done
        wait(futures)
        self._transition(RunState.AGGREGATING)
        for fut, path in futures.items():
            exc = fut.exception()
            if exc is not None:
                logger.error("scan worker failed for %s: %r", path, exc)
                self.reporter.error(path, f"{type(exc).__name__}: {exc}")
        result = aggregator.freeze()
        logger.debug("scan: %d files with %d occurrences", len(result.files), result.total_occurrences)
        return result

    def rewrite(self, pool: ThreadPoolExecutor, result: AggregateResult) -> List[RewriteOutcome]:
        self._transition(RunState.REWRITING)
        width = label_width(result)
        futures = {
            pool.submit(rewrite_file, o.path, o.occurrences, self.spec): o
            for o in result.outcomes
        }
        outcomes: List[RewriteOutcome] = []
        for fut in as_completed(futures):
            scanned = futures[fut]
            try:
                rewrite = fut.result()
            except Exception as e:
                logger.exception("rewrite worker failed for %s", scanned.path)
                rewrite = RewriteOutcome(scanned.path, False, f"{type(e).__name__}: {e}")
            outcomes.append(rewrite)
            self.reporter.committed(scanned, rewrite, self.spec.old_text, self.spec.new_text, width)
        return outcomes

    # ---------- driver ----------
    def run(self, paths: Optional[Sequence[str]] = None) -> RunReport:
        try:
            self.spec.validate()
        except NoopError as e:
            self.reporter.notice(str(e), style="warning")
            return RunReport(RunStatus.NOOP)

        files = self.candidates(paths)
        with ThreadPoolExecutor(max_workers=self.config.max_workers,
                                thread_name_prefix="refactor") as pool:
            result = self.scan(pool, files)

            if result.is_empty:
                self._transition(RunState.DONE)
                self.reporter.notice("nothing to refactor", style="warning")
                return RunReport(RunStatus.NOTHING_TO_DO, result)

            self._transition(RunState.PREVIEWING)
            if self.json_output:
                self.reporter.preview_json(result)
            else:
                self.reporter.preview(result, self.spec.old_text)

            if not self.spec.commit:
                self._transition(RunState.DONE)
                return RunReport(RunStatus.COMPLETED, result)

            self._transition(RunState.AWAITING_CONFIRMATION)
            if not confirm(self.reader):
                self._transition(RunState.CANCELLED)
                self.reporter.notice("cancelled; no files were changed", style="warning")
                return RunReport(RunStatus.CANCELLED, result)

            rewrites = self.rewrite(pool, result)

        self._transition(RunState.DONE)
        self.reporter.summary(rewrites)
        return RunReport(RunStatus.COMPLETED, result, rewrites)
