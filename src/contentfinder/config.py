"""Search configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable


class ConfigError(ValueError):
    """Raised when a search configuration is invalid."""


def parse_extensions(raw: str | None) -> tuple[str, ...]:
    """Split a colon-separated extension list such as ``.cpp:.hpp``."""
    if not raw:
        return ()
    return tuple(part for part in raw.split(":") if part)


def _check_limit(name: str, value: int) -> None:
    if value < 0:
        raise ConfigError(f"{name} must be zero (unlimited) or a positive integer, got {value}")


@dataclass(slots=True, frozen=True)
class FilterPolicy:
    """Rules deciding which enumerated files get scanned.

    A value of ``0`` for ``max_size`` or ``max_queued`` and an empty
    ``extensions`` tuple mean the corresponding filter is disabled.
    """

    extensions: tuple[str, ...] = ()
    max_size: int = 0
    max_queued: int = 0

    def __post_init__(self) -> None:
        _check_limit("max_size", self.max_size)
        _check_limit("max_queued", self.max_queued)
        if any(not extension for extension in self.extensions):
            raise ConfigError("Extensions must be non-empty strings")

    @property
    def extensions_matter(self) -> bool:
        return bool(self.extensions)

    @property
    def size_matters(self) -> bool:
        return self.max_size > 0

    @property
    def count_matters(self) -> bool:
        return self.max_queued > 0

    def allows_extension(self, path: str) -> bool:
        if not self.extensions_matter:
            return True
        return any(path.endswith(extension) for extension in self.extensions)

    def allows_size(self, size: int) -> bool:
        return not self.size_matters or size <= self.max_size

    def queue_full(self, queued: int) -> bool:
        return self.count_matters and queued >= self.max_queued


@dataclass(slots=True, frozen=True)
class SearchConfig:
    patterns: tuple[str | bytes, ...]
    root: Path = Path(".")
    extensions: tuple[str, ...] = ()
    max_size: int = 0
    max_queued: int = 0
    workers: int = 1

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ConfigError("Please specify at least one search pattern")
        if any(len(pattern) == 0 for pattern in self.patterns):
            raise ConfigError("Search patterns must not be empty")
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        FilterPolicy(self.extensions, self.max_size, self.max_queued)

    @classmethod
    def build(
        cls,
        patterns: Iterable[str | bytes],
        *,
        root: Path | str = ".",
        extensions: str | Iterable[str] | None = None,
        max_size: int = 0,
        max_queued: int = 0,
        workers: int = 1,
    ) -> "SearchConfig":
        """Create a config from loosely typed inputs (CLI values, lists)."""
        if isinstance(extensions, str) or extensions is None:
            parsed_extensions = parse_extensions(extensions)
        else:
            parsed_extensions = tuple(extensions)
        return cls(
            patterns=tuple(patterns),
            root=Path(root),
            extensions=parsed_extensions,
            max_size=max_size,
            max_queued=max_queued,
            workers=workers,
        )

    @property
    def policy(self) -> FilterPolicy:
        return FilterPolicy(
            extensions=self.extensions,
            max_size=self.max_size,
            max_queued=self.max_queued,
        )

    def resolve_root(self, base_dir: Path | None = None) -> Path:
        if self.root.is_absolute() or base_dir is None:
            return self.root
        return base_dir / self.root
