"""Rich rendering of previews, post-commit diffs and per-file status lines."""
from __future__ import annotations
import json
from typing import Optional, Sequence

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text
from rich.theme import Theme

from .aggregate import AggregateResult
from .tools.rewriter import RewriteOutcome
from .config import ENCODING
from .tools.scanner import FileScanOutcome, Finding

THEME = Theme({
    "path": "magenta",
    "line_num": "green",
    "match": "bold red",
    "removed": "strike",
    "inserted": "bold blue",
    "ok": "bold green",
    "warning": "yellow",
    "danger": "bold red",
    "info": "dim cyan",
})


def label(path: str, finding: Finding) -> str:
    return f"{printable(path)}:{finding.line_number}"


def label_width(result: AggregateResult) -> int:
    """Cell width of the longest path:line label, so rows line up as a table."""
    return max((cell_len(label(o.path, f)) for o in result.outcomes for f in o.findings), default=0)


def _label_text(path: str, finding: Finding, width: int) -> Text:
    text = Text()
    text.append(printable(path), style="path")
    text.append(":")
    text.append(str(finding.line_number), style="line_num")
    text.append(" " * max(0, width - cell_len(label(path, finding))))
    text.append("  ")
    return text


def printable(s: str) -> str:
    """Show undecodable bytes (carried as lone surrogates) as U+FFFD."""
    return s.encode(ENCODING, "surrogateescape").decode(ENCODING, "replace")


def _mark(line: str, old: str, limit: int, render) -> Text:
    text = Text()
    pos = 0
    for _ in range(limit):
        hit = line.find(old, pos)
        if hit < 0:
            break
        text.append(line[pos:hit])
        render(text)
        pos = hit + len(old)
    text.append(line[pos:])
    return text


def preview_line(path: str, finding: Finding, old: str, width: int = 0) -> Text:
    old = printable(old)
    line = _mark(printable(finding.line_text), old, finding.occurrence_count,
                 lambda t: t.append(old, style="match"))
    return _label_text(path, finding, width) + line


def diff_line(path: str, finding: Finding, old: str, new: str, width: int = 0) -> Text:
    old, new = printable(old), printable(new)
    def render(t: Text) -> None:
        t.append(old, style="removed")
        t.append(new, style="inserted")
    line = _mark(printable(finding.line_text), old, finding.occurrence_count, render)
    return _label_text(path, finding, width) + line


class Reporter:
    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self.console: Console = console or Console(theme=THEME, highlight=False)
        # errors go to stderr so --json output on stdout stays parseable
        if err_console is None:
            err_console = console or Console(theme=THEME, highlight=False, stderr=True)
        self.err_console: Console = err_console

    def preview(self, result: AggregateResult, old: str) -> None:
        width = label_width(result)
        for outcome in result.sorted_outcomes():
            for finding in outcome.findings:
                self.console.print(preview_line(outcome.path, finding, old, width))
        self.console.print(
            f"[info]{result.total_occurrences} occurrence(s) on {result.total_findings} "
            f"line(s) in {len(result.outcomes)} file(s)[/info]"
        )

    def preview_json(self, result: AggregateResult) -> None:
        self.console.print_json(json.dumps(result.to_dict()), ensure_ascii=True)

    def committed(self, outcome: FileScanOutcome, rewrite: RewriteOutcome,
                  old: str, new: str, width: int = 0) -> None:
        if rewrite.success:
            for finding in outcome.findings:
                self.console.print(diff_line(outcome.path, finding, old, new, width))
            self.console.print(Text.assemble(
                ("OK ", "ok"), (printable(rewrite.path), "path"), f" ({rewrite.replaced} replaced)"))
        else:
            self.error(rewrite.path, rewrite.error or "rewrite failed")

    def error(self, path: str, cause: str) -> None:
        self.err_console.print(Text.assemble(("ERROR ", "danger"), (printable(path), "path"), f": {cause}"))

    def notice(self, message: str, style: str = "info") -> None:
        self.console.print(Text(message, style=style))

    def summary(self, rewrites: Sequence[RewriteOutcome]) -> None:
        ok = sum(1 for r in rewrites if r.success)
        failed = len(rewrites) - ok
        style = "ok" if not failed else "warning"
        self.notice(f"Done: {ok} file(s) rewritten, {failed} failed", style=style)
