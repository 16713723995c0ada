"""Utility helpers for working with files."""

from __future__ import annotations

import errno
import logging
import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from contentfinder.models import FileOpenError, FileReadError, SearchError

LOGGER = logging.getLogger(__name__)

OnError = Callable[[Optional[str], OSError], None]


def _log_error(path: Optional[str], exc: OSError) -> None:
    LOGGER.warning("Could not enumerate %s: %s", path or "unknown entry", exc)


def _scan_sorted(directory: str) -> List[os.DirEntry]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def iter_files(root: Path | str, on_error: OnError | None = None) -> Iterator[str]:
    """Yield the paths of all regular files under ``root``, depth first.

    Entries of each directory are visited in name order, so the sequence is
    stable for an unchanged tree. Symbolic links to files are followed,
    symbolic links to directories are not descended into.

    Errors on individual entries are passed to ``on_error`` and enumeration
    carries on. A root that cannot be listed raises :class:`SearchError`
    immediately, before the first path is produced.
    """
    root_path = os.path.abspath(os.fspath(root))
    if not os.path.isdir(root_path):
        raise SearchError(f"Couldn't retrieve directory entries for {root}: not a directory")
    try:
        entries = _scan_sorted(root_path)
    except OSError as exc:
        raise SearchError(f"Couldn't retrieve directory entries for {root}: {exc}") from exc
    return _walk(entries, on_error or _log_error)


def _walk(entries: List[os.DirEntry], on_error: OnError) -> Iterator[str]:
    # One iterator per open directory; depth is bounded by memory, not the
    # interpreter's recursion limit.
    stack: List[Iterator[os.DirEntry]] = [iter(entries)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                try:
                    children = _scan_sorted(entry.path)
                except OSError as exc:
                    on_error(entry.path, exc)
                    continue
                stack.append(iter(children))
            elif entry.is_file():
                yield entry.path
            elif entry.is_symlink() and not os.path.exists(entry.path):
                on_error(
                    entry.path,
                    FileNotFoundError(errno.ENOENT, "Broken symbolic link", entry.path),
                )
        except OSError as exc:
            on_error(entry.path, exc)


def is_text_path(path: str) -> bool:
    """Return True when ``path`` round-trips to valid UTF-8."""
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def file_size(path: str) -> int:
    return os.stat(path).st_size


def read_file_bytes(path: str) -> bytes:
    """Read the whole file, separating open failures from read failures."""
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise FileOpenError(exc.errno, f"Failed to open stream to file: {exc.strerror}", path) from exc
    with handle:
        try:
            return handle.read()
        except OSError as exc:
            raise FileReadError(exc.errno, f"Failed to read data from file: {exc.strerror}", path) from exc
