"""Core ContentFinder data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

UNKNOWN_PATH = "unknown"


class SkipReason(str, Enum):
    """Why a candidate never reached the matched/unmatched classification."""

    ENUMERATION_ERROR = "EnumerationError"
    PATH_ENCODING_ERROR = "PathEncodingError"
    METADATA_ERROR = "MetadataError"
    EXTENSION_MISMATCH = "ExtensionMismatch"
    SIZE_EXCEEDED = "SizeExceeded"
    OPEN_ERROR = "OpenError"
    READ_ERROR = "ReadError"

    def __str__(self) -> str:
        return self.value


class SearchError(RuntimeError):
    """Fatal failure that aborts a whole search."""


class ScanError(OSError):
    """I/O failure while scanning a queued file."""


class FileOpenError(ScanError):
    pass


class FileReadError(ScanError):
    pass


@dataclass(slots=True, frozen=True)
class Candidate:
    """A regular file discovered by enumeration, not yet classified."""

    path: str
    size: int


@dataclass(slots=True, frozen=True)
class SkippedFile:
    path: str
    reason: SkipReason
    detail: str = ""


@dataclass(slots=True, frozen=True)
class MatchedFile:
    path: str
    patterns: tuple[str | bytes, ...]


@dataclass(slots=True, frozen=True)
class SearchProgress:
    """Observer event emitted after each classification or scan."""

    stage: str
    current: int
    total: int
    path: Optional[str] = None


@dataclass(slots=True)
class SearchQueue:
    """Output of the filter stage: files to scan plus filter-time skips."""

    queued: List[Candidate] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)
    examined: int = 0
    truncated: bool = False

    @property
    def paths(self) -> List[str]:
        return [candidate.path for candidate in self.queued]


@dataclass(slots=True)
class SearchResults:
    """Per-file outcomes split into matched, skipped and unmatched buckets.

    Each bucket keeps the order in which outcomes were added. A file is
    expected to be added to exactly one bucket.
    """

    matched: List[MatchedFile] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)

    def add_matched(self, path: str, patterns: tuple[str | bytes, ...]) -> None:
        if not patterns:
            raise ValueError(f"Matched file {path} needs at least one pattern")
        self.matched.append(MatchedFile(path=path, patterns=tuple(patterns)))

    def add_unmatched(self, path: str) -> None:
        self.unmatched.append(path)

    def add_skipped(self, skipped: SkippedFile) -> None:
        self.skipped.append(skipped)

    def add_scan_result(self, path: str, patterns: tuple[str | bytes, ...]) -> None:
        if patterns:
            self.add_matched(path, patterns)
        else:
            self.add_unmatched(path)

    @property
    def matched_count(self) -> int:
        return len(self.matched)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def total(self) -> int:
        return self.matched_count + self.unmatched_count + self.skipped_count
