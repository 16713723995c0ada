"""Aho-Corasick multi-pattern matcher over raw bytes."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple, Union

from contentfinder.utils.files import read_file_bytes

LOGGER = logging.getLogger(__name__)

Pattern = Union[str, bytes]

_ROOT = 0
_NO_PATTERN = -1


@dataclass(slots=True, frozen=True)
class Match:
    """One occurrence of a pattern; ``end`` is exclusive."""

    pattern: Pattern
    start: int
    end: int


def _encode(pattern: Pattern) -> bytes:
    if isinstance(pattern, str):
        return pattern.encode("utf-8")
    return bytes(pattern)


class PatternMatcher:
    """Finds every occurrence of a fixed set of literal patterns in one pass.

    The automaton is built once in the constructor and never mutated
    afterwards, so one instance can be shared by every file of a search, and
    by several threads.

    Patterns are compared byte for byte (``str`` patterns are encoded as
    UTF-8). Duplicate patterns collapse into one, keeping the first spelling.
    """

    def __init__(self, patterns: Sequence[Pattern]) -> None:
        if not patterns:
            raise ValueError("PatternMatcher needs at least one pattern")

        self._patterns: List[Pattern] = []
        self._lengths: List[int] = []
        seen: Dict[bytes, int] = {}
        for pattern in patterns:
            encoded = _encode(pattern)
            if not encoded:
                raise ValueError("Empty patterns would match everywhere and are not allowed")
            if encoded in seen:
                continue
            seen[encoded] = len(self._patterns)
            self._patterns.append(pattern)
            self._lengths.append(len(encoded))

        self._goto: List[Dict[int, int]] = [{}]
        self._terminal: List[int] = [_NO_PATTERN]
        self._fail: List[int] = [_ROOT]
        self._output: List[int] = [_ROOT]

        for encoded, index in seen.items():
            self._insert(encoded, index)
        self._link()
        LOGGER.debug(
            "Built automaton with %d states for %d patterns",
            len(self._goto),
            len(self._patterns),
        )

    def _insert(self, encoded: bytes, index: int) -> None:
        state = _ROOT
        for byte in encoded:
            following = self._goto[state].get(byte)
            if following is None:
                following = len(self._goto)
                self._goto.append({})
                self._terminal.append(_NO_PATTERN)
                self._fail.append(_ROOT)
                self._output.append(_ROOT)
                self._goto[state][byte] = following
            state = following
        self._terminal[state] = index

    def _link(self) -> None:
        # Breadth first, so every fail target is finished before it is used.
        # _output[s] is the nearest state on the fail chain of s that ends a
        # pattern, or the root when there is none.
        queue = deque(self._goto[_ROOT].values())
        while queue:
            state = queue.popleft()
            for byte, child in self._goto[state].items():
                queue.append(child)
                fallback = self._fail[state]
                while fallback != _ROOT and byte not in self._goto[fallback]:
                    fallback = self._fail[fallback]
                target = self._goto[fallback].get(byte, _ROOT)
                self._fail[child] = target
                if self._terminal[target] != _NO_PATTERN:
                    self._output[child] = target
                else:
                    self._output[child] = self._output[target]

    @property
    def patterns(self) -> Tuple[Pattern, ...]:
        return tuple(self._patterns)

    @property
    def state_count(self) -> int:
        return len(self._goto)

    def __len__(self) -> int:
        return len(self._patterns)

    def _scan(self, data: bytes) -> Iterator[Tuple[int, int, int]]:
        goto = self._goto
        fail = self._fail
        terminal = self._terminal
        output = self._output
        lengths = self._lengths

        state = _ROOT
        for position, byte in enumerate(data):
            while state != _ROOT and byte not in goto[state]:
                state = fail[state]
            state = goto[state].get(byte, _ROOT)

            node = state if terminal[state] != _NO_PATTERN else output[state]
            while node != _ROOT:
                index = terminal[node]
                end = position + 1
                yield index, end - lengths[index], end
                node = output[node]

    def iter_matches(self, data: bytes) -> Iterator[Match]:
        """Yield every occurrence, overlapping and nested ones included.

        Matches come out ordered by end offset; matches sharing an end
        offset are ordered longest first.
        """
        for index, start, end in self._scan(data):
            yield Match(pattern=self._patterns[index], start=start, end=end)

    def find_patterns(self, data: bytes) -> Tuple[Pattern, ...]:
        """Return each pattern found in ``data`` once.

        The result is ordered by the start offset of each pattern's first
        occurrence, ties going to the pattern listed first.
        """
        first_start: Dict[int, int] = {}
        wanted = len(self._patterns)
        for index, start, _ in self._scan(data):
            if index in first_start:
                continue
            first_start[index] = start
            if len(first_start) == wanted:
                break
        ordered = sorted(first_start, key=lambda index: (first_start[index], index))
        return tuple(self._patterns[index] for index in ordered)

    def scan_file(self, path: str) -> Tuple[Pattern, ...]:
        """Read ``path`` fully and return the patterns it contains.

        Raises :class:`~contentfinder.models.FileOpenError` or
        :class:`~contentfinder.models.FileReadError` on I/O failures.
        """
        return self.find_patterns(read_file_bytes(path))
