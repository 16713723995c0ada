"""Content search pipeline: enumerate, filter, scan, aggregate."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, Sequence, Tuple, Union

from contentfinder.config import FilterPolicy, SearchConfig
from contentfinder.models import (
    FileOpenError,
    ScanError,
    SearchError,
    SearchProgress,
    SearchQueue,
    SearchResults,
    SkippedFile,
    SkipReason,
)
from contentfinder.search.automaton import Pattern, PatternMatcher
from contentfinder.search.queue import ProgressCallback, QueueBuilder

LOGGER = logging.getLogger(__name__)

ScanOutcome = Union[Tuple[Pattern, ...], SkippedFile]


class ContentSearcher:
    """Runs one literal multi-pattern search over a directory tree.

    The matcher is built by the caller (or :meth:`from_config`) and reused
    for every queued file. With ``workers > 1`` files are scanned on a
    thread pool, but outcomes are still recorded in queue order.
    """

    def __init__(
        self,
        matcher: PatternMatcher,
        policy: FilterPolicy | None = None,
        *,
        workers: int = 1,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.matcher = matcher
        self.policy = policy or FilterPolicy()
        self.workers = workers
        self.progress = progress

    @classmethod
    def from_config(
        cls, config: SearchConfig, *, progress: ProgressCallback | None = None
    ) -> "ContentSearcher":
        return cls(
            PatternMatcher(config.patterns),
            config.policy,
            workers=config.workers,
            progress=progress,
        )

    def build_queue(self, root: Path | str) -> SearchQueue:
        return preview_queue(root, self.policy, progress=self.progress)

    def search(self, root: Path | str) -> SearchResults:
        """Search every eligible file under ``root``.

        Raises :class:`SearchError` when ``root`` itself cannot be listed.
        Per-file problems never raise; they end up in ``results.skipped``.
        """
        try:
            queue = self.build_queue(root)
        except SearchError as exc:
            LOGGER.error("Search aborted: %s", exc)
            raise

        results = SearchResults()
        for skipped in queue.skipped:
            results.add_skipped(skipped)

        paths = queue.paths
        LOGGER.info("Searching %d queued files for %d patterns", len(paths), len(self.matcher))
        for index, (path, outcome) in enumerate(zip(paths, self._scan_all(paths)), start=1):
            if isinstance(outcome, SkippedFile):
                LOGGER.debug("Skipped %s (%s): %s", outcome.path, outcome.reason, outcome.detail)
                results.add_skipped(outcome)
            else:
                results.add_scan_result(path, outcome)
            if self.progress is not None:
                self.progress(SearchProgress(stage="scan", current=index, total=len(paths), path=path))

        LOGGER.info(
            "Matched %d files, %d unmatched candidates, %d files skipped",
            results.matched_count,
            results.unmatched_count,
            results.skipped_count,
        )
        return results

    def _scan_all(self, paths: Sequence[str]) -> Iterator[ScanOutcome]:
        if self.workers <= 1 or len(paths) <= 1:
            return map(self._scan_single, paths)
        return self._scan_parallel(paths)

    def _scan_parallel(self, paths: Sequence[str]) -> Iterator[ScanOutcome]:
        # Executor.map yields in submission order, which keeps queue order.
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            yield from executor.map(self._scan_single, paths)

    def _scan_single(self, path: str) -> ScanOutcome:
        try:
            return self.matcher.scan_file(path)
        except ScanError as exc:
            reason = SkipReason.OPEN_ERROR if isinstance(exc, FileOpenError) else SkipReason.READ_ERROR
            return SkippedFile(path=path, reason=reason, detail=str(exc))


def perform_search(
    config: SearchConfig,
    *,
    base_dir: Path | None = None,
    progress: ProgressCallback | None = None,
) -> SearchResults:
    """Run a complete search described by ``config``."""
    searcher = ContentSearcher.from_config(config, progress=progress)
    return searcher.search(config.resolve_root(base_dir))


def preview_queue(
    root: Path | str,
    policy: FilterPolicy,
    *,
    progress: ProgressCallback | None = None,
) -> SearchQueue:
    """Enumerate and filter without reading any file contents."""
    return QueueBuilder(policy, progress=progress).build_from_root(root)
