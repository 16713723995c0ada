"""Candidate filtering and scan queue construction."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from contentfinder.config import FilterPolicy
from contentfinder.models import (
    UNKNOWN_PATH,
    Candidate,
    SearchProgress,
    SearchQueue,
    SkippedFile,
    SkipReason,
)
from contentfinder.utils.files import file_size, is_text_path, iter_files

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[SearchProgress], None]


def _display_path(path: Optional[str]) -> str:
    if path is None or not is_text_path(path):
        return UNKNOWN_PATH
    return path


class QueueBuilder:
    """Decides, file by file, what gets scanned and what gets skipped."""

    def __init__(
        self,
        policy: FilterPolicy,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.policy = policy
        self.progress = progress

    def build_from_root(self, root: Path | str) -> SearchQueue:
        """Enumerate ``root`` and filter its files.

        Enumeration errors are interleaved with the other skips in the
        order they were met.
        """
        pending: List[SkippedFile] = []

        def on_error(path: Optional[str], exc: OSError) -> None:
            LOGGER.debug("Enumeration error at %s: %s", path, exc)
            pending.append(
                SkippedFile(
                    path=_display_path(path),
                    reason=SkipReason.ENUMERATION_ERROR,
                    detail=f"Skipped due to error when matching element: {exc}",
                )
            )

        return self.build(iter_files(root, on_error=on_error), pending=pending)

    def build(
        self,
        paths: Iterable[str],
        *,
        pending: List[SkippedFile] | None = None,
    ) -> SearchQueue:
        """Classify each path in ``paths`` as queued or skipped.

        ``pending`` may be appended to by the producer of ``paths`` while it
        is being consumed; its entries are moved into the queue's skip list
        as they appear.
        """
        pending = pending if pending is not None else []
        queue = SearchQueue()

        for path in paths:
            queue.skipped.extend(pending)
            pending.clear()
            skipped = self._classify(path, queue)
            if queue.truncated:
                LOGGER.info(
                    "Queue limit of %d files reached, ignoring the remaining files",
                    self.policy.max_queued,
                )
                break
            queue.examined += 1
            if skipped is not None:
                LOGGER.debug("Skipped %s (%s): %s", skipped.path, skipped.reason, skipped.detail)
                queue.skipped.append(skipped)
            self._notify(queue, path)

        queue.skipped.extend(pending)
        pending.clear()
        LOGGER.info(
            "Queued %d of %d examined files (%d skipped)",
            len(queue.queued),
            queue.examined,
            len(queue.skipped),
        )
        return queue

    def _classify(self, path: str, queue: SearchQueue) -> SkippedFile | None:
        if not is_text_path(path):
            return SkippedFile(
                path=UNKNOWN_PATH,
                reason=SkipReason.PATH_ENCODING_ERROR,
                detail="Couldn't convert the path into text, presumably because it is invalid UTF-8.",
            )

        try:
            size = file_size(path)
        except OSError as exc:
            return SkippedFile(
                path=path,
                reason=SkipReason.METADATA_ERROR,
                detail=f"Error when retrieving the file's size: {exc}",
            )

        if self.policy.queue_full(len(queue.queued)):
            queue.truncated = True
            return None

        if not self.policy.allows_extension(path):
            return SkippedFile(
                path=path,
                reason=SkipReason.EXTENSION_MISMATCH,
                detail="The file did not end with any of the provided extensions.",
            )

        if not self.policy.allows_size(size):
            return SkippedFile(
                path=path,
                reason=SkipReason.SIZE_EXCEEDED,
                detail=f"The file exceeded the provided size ({size} > {self.policy.max_size})",
            )

        queue.queued.append(Candidate(path=path, size=size))
        return None

    def _notify(self, queue: SearchQueue, path: str) -> None:
        if self.progress is None:
            return
        self.progress(
            SearchProgress(
                stage="queue",
                current=len(queue.queued),
                total=queue.examined,
                path=_display_path(path),
            )
        )
