from __future__ import annotations
import logging
import sys
from typing import List, Optional

import typer
from rich import print
from dotenv import load_dotenv

from . import __version__
from .config import RunConfig, SearchSpec
from .report import Reporter
from .runtime import Refactor

# Load environment variables from .env file
load_dotenv()

HELP = """
Searches all the files in the current directory containing OLD and replaces
every occurrence with NEW. Only matching lines are shown unless -x is given,
in which case the changes are applied after a single y/N confirmation.

  refactor OLD NEW
  refactor OLD NEW FILES...

To search for the literal text "run", spell the command out:

  refactor run run NEW
"""

app = typer.Typer(add_completion=False, help="Bulk literal search-and-replace with preview.")

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    logger = logging.getLogger("bulk_refactor")
    # drop handlers installed by an earlier call
    for h in [h for h in logger.handlers if getattr(h, "_cli_handler", False)]:
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.DEBUG if (debug or log_file) else logging.WARNING)

    handlers: List[logging.Handler] = []
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))
    if debug:
        handlers.append(logging.StreamHandler(sys.stderr))
    for handler in handlers:
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._cli_handler = True
        logger.addHandler(handler)


@app.command()
def version():
    print(f"refactor [bold]{__version__}[/bold]")


@app.command(help=HELP)
def run(old: str = typer.Argument(..., help="Literal text to search for"),
        new: str = typer.Argument(..., help="Replacement text"),
        files: Optional[List[str]] = typer.Argument(None, help="Files to process (default: walk the current directory)"),
        commit: bool = typer.Option(False, "-x", "--commit", help="Execute the replacement operation (default is preview-only)"),
        workers: Optional[int] = typer.Option(None, help="Max concurrent file operations (env REFACTOR_MAX_WORKERS)"),
        exclude: Optional[List[str]] = typer.Option(None, help="Directory name to skip while walking; repeatable"),
        json_output: bool = typer.Option(False, "--json", help="Print the preview as JSON"),
        debug: bool = typer.Option(False, help="Enable debug logging"),
        log_file: Optional[str] = typer.Option(None, help="Write the debug log to this file")):
    if json_output and commit:
        raise typer.BadParameter("--json is only available in preview mode")

    try:
        config = RunConfig.from_env()
    except ValueError as e:
        raise typer.BadParameter(f"invalid REFACTOR_* environment setting: {e}")
    if workers is not None:
        if workers < 1:
            raise typer.BadParameter("--workers must be at least 1")
        config.max_workers = workers
    if exclude:
        config.exclude = tuple(exclude)
    config.debug = config.debug or debug
    config.log_file = log_file or config.log_file
    setup_logging(config.debug, config.log_file)

    if not old and new:
        raise typer.BadParameter("OLD must not be empty")

    spec = SearchSpec(old_text=old, new_text=new, commit=commit)
    report = Refactor(spec, config, Reporter(), json_output=json_output).run(files or None)
    raise typer.Exit(code=report.status.exit_code)


def _needs_run(argv: List[str]) -> bool:
    if len(argv) == 1:
        return True
    first = argv[1]
    # `version` takes no arguments, so `refactor version v2` is a search for "version"
    if first == 'version':
        return len(argv) > 2
    return first not in ['run', '--help']


def main():
    # If no arguments provided or no recognized command, default to 'run'
    if _needs_run(sys.argv):
        sys.argv.insert(1, 'run')
    app()


if __name__ == "__main__":
    main()
