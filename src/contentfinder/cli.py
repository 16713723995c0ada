"""Command line interface for ContentFinder."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.text import Text

from contentfinder.config import ConfigError, FilterPolicy, SearchConfig, parse_extensions
from contentfinder.models import SearchError, SearchProgress, SearchResults, SkippedFile
from contentfinder.search.searcher import perform_search, preview_queue


console = Console()
app = typer.Typer(
    help="ContentFinder - literal multi-pattern content search",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_SEPARATOR = "-" * 50


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _emit(line: str) -> None:
    console.print(line, markup=False, highlight=False, soft_wrap=True)


def format_patterns(patterns: Iterable[str]) -> str:
    return json.dumps(list(patterns), ensure_ascii=False)


def _progress_reporter(status: Status) -> Callable[[SearchProgress], None]:
    def report(event: SearchProgress) -> None:
        if event.stage == "queue":
            message = f"Queueing files.. {event.current} / {event.total} Files have been queued.."
        else:
            name = Path(event.path).name if event.path else ""
            message = f"[{event.current} / {event.total}] Searching through {name} for patterns.."
        status.update(Text(message))

    return report


def _print_skipped(skipped: List[SkippedFile]) -> None:
    for skipped_file in skipped:
        _emit(f"SKIPPED({skipped_file.reason.value}) - {skipped_file.path}")
    _emit(_SEPARATOR)


def _print_results(results: SearchResults, *, show_skipped: bool, show_unmatched: bool) -> None:
    rendered = [format_patterns(matched.patterns) for matched in results.matched]
    padding = max((len(text) for text in rendered), default=0)

    _emit(_SEPARATOR)
    if show_skipped:
        _print_skipped(results.skipped)

    if show_unmatched:
        for unmatched in results.unmatched:
            _emit(f"DIDN'T MATCH - {unmatched}")
        _emit(_SEPARATOR)

    for text, matched in zip(rendered, results.matched):
        _emit(f"{text.ljust(padding)} | MATCHED IN > {matched.path}")

    _emit(_SEPARATOR)
    _emit(
        f"Matched {results.matched_count} files, {results.unmatched_count} unmatched candidates, "
        f"{results.skipped_count} files skipped."
    )


@app.callback()
def main() -> None:
    """ContentFinder - search file contents for literal patterns."""


@app.command()
def search(
    patterns: List[str] = typer.Argument(..., help="Literal patterns to look for. Put them after -- when one starts with a dash, e.g. search -- -foo."),
    directory: Path = typer.Option(Path("."), "--dir", "-dir", help="Directory to search"),
    max_size: int = typer.Option(0, "--max-size", "-mfs", help="Do not queue files larger than this many bytes (0 = unlimited)"),
    max_queued: int = typer.Option(0, "--max-queued", "-mfq", help="Maximum amount of queued files (0 = unlimited)"),
    extensions: Optional[str] = typer.Option(None, "--ext", "-ext", help="Only queue files with one of these extensions, e.g. .cpp:.hpp"),
    show_skipped: bool = typer.Option(False, "--show-skipped", "-ssk", help="Show skipped files and why"),
    show_unmatched: bool = typer.Option(False, "--show-unmatched", "-sum", help="Show queued files that matched nothing"),
    workers: int = typer.Option(1, "--workers", "-j", help="Number of files scanned in parallel"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search files under a directory for any of the given patterns."""
    _setup_logging(verbose)
    try:
        config = SearchConfig.build(
            patterns,
            root=directory,
            extensions=extensions,
            max_size=max_size,
            max_queued=max_queued,
            workers=workers,
        )
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    _emit("Performing content search with the following parameters.")
    _emit(_SEPARATOR)
    _emit(f"Search Patterns: {format_patterns(config.patterns)}")
    _emit(f"Target Dir: {config.root}")
    _emit(f"File Extensions: {format_patterns(config.extensions)}")
    _emit(f"Max File Size: {config.max_size}")
    _emit(f"Max Queued Files: {config.max_queued}")

    try:
        with console.status("Queueing files..") as status:
            results = perform_search(config, base_dir=Path.cwd(), progress=_progress_reporter(status))
    except SearchError as exc:
        console.print(f"[red]Search failed:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1) from exc

    _print_results(results, show_skipped=show_skipped, show_unmatched=show_unmatched)


@app.command()
def queue(
    directory: Path = typer.Option(Path("."), "--dir", "-dir", help="Directory to enumerate"),
    max_size: int = typer.Option(0, "--max-size", "-mfs", help="Do not queue files larger than this many bytes (0 = unlimited)"),
    max_queued: int = typer.Option(0, "--max-queued", "-mfq", help="Maximum amount of queued files (0 = unlimited)"),
    extensions: Optional[str] = typer.Option(None, "--ext", "-ext", help="Only queue files with one of these extensions, e.g. .cpp:.hpp"),
    show_skipped: bool = typer.Option(False, "--show-skipped", "-ssk", help="Show skipped files and why"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List the files a search would scan, without reading them."""
    _setup_logging(verbose)
    try:
        policy = FilterPolicy(
            extensions=parse_extensions(extensions),
            max_size=max_size,
            max_queued=max_queued,
        )
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        with console.status("Queueing files..") as status:
            result = preview_queue(directory, policy, progress=_progress_reporter(status))
    except SearchError as exc:
        console.print(f"[red]Queueing failed:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1) from exc

    for candidate in result.queued:
        _emit(f"QUEUED ({candidate.size} bytes) - {candidate.path}")
    _emit(_SEPARATOR)
    if show_skipped:
        _print_skipped(result.skipped)

    summary = f"Queued {len(result.queued)} of {result.examined} examined files, {len(result.skipped)} skipped."
    if result.truncated:
        summary += f" Stopped at the limit of {policy.max_queued} queued files."
    _emit(summary)
