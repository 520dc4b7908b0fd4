"""Least recently used cache of filter evaluation results."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass

__all__ = ["DEFAULT_DEPTH", "CacheStats", "CacheRecord", "FilterCache"]

DEFAULT_DEPTH = 16


@dataclass
class CacheStats:
    """Counters describing how the cache has been used."""

    clear_calls: int = 0
    check_calls: int = 0
    add_calls: int = 0
    matches: int = 0
    removals: int = 0


@dataclass
class CacheRecord:
    """A cached result for one filter word and node handle."""

    filter_bits: int
    handle: int
    result: int
    last_used: int


class FilterCache:
    """Fixed-depth cache of filter match results, evicting the least recently used."""

    def __init__(
        self, depth: int = DEFAULT_DEPTH, clock: Callable[[], int] | None = None
    ) -> None:
        if depth < 1:
            raise ValueError("cache depth must be at least 1")
        self.depth = depth
        self._clock = clock if clock is not None else itertools.count(1).__next__
        self._records: list[CacheRecord | None] = [None] * depth
        self.stats = CacheStats()

    @property
    def records(self) -> list[CacheRecord | None]:
        """The cache slots, None where a slot is empty."""
        return list(self._records)

    def clear(self) -> None:
        """Remove every record from the cache."""
        self.stats.clear_calls += 1
        self._records = [None] * self.depth

    def check(self, filter_bits: int, handle: int) -> int | None:
        """Return the cached result for this filter word and handle, or None."""
        self.stats.check_calls += 1
        for record in self._records:
            if (
                record is not None
                and record.filter_bits == filter_bits
                and record.handle == handle
            ):
                record.last_used = self._clock()
                self.stats.matches += 1
                return record.result
        return None

    def add(self, filter_bits: int, handle: int, result: int) -> None:
        """Insert a result, evicting the least recently used record if full."""
        self.stats.add_calls += 1
        try:
            slot = self._records.index(None)
        except ValueError:
            slot = min(
                range(self.depth),
                key=lambda i: self._records[i].last_used,  # type: ignore[union-attr]
            )
            self.stats.removals += 1
        self._records[slot] = CacheRecord(
            filter_bits=filter_bits,
            handle=handle,
            result=int(result),
            last_used=self._clock(),
        )

    def format(self) -> str:
        """Return a listing of every cache slot."""
        lines = []
        for i, record in enumerate(self._records):
            if record is None:
                lines.append(f"{i:04d}: empty")
            else:
                lines.append(
                    f"{i:04d}: 0x{record.filter_bits & 0xFFFFFFFF:08X} "
                    f"0x{record.handle:02d} {record.result} "
                    f"(last_used: {record.last_used})"
                )
        return "\n".join(lines) + "\n"

    def format_stats(self) -> str:
        """Return the usage counters as text."""
        s = self.stats
        return (
            f"clear calls: {s.clear_calls}\n"
            f"check calls: {s.check_calls}\n"
            f"add calls:   {s.add_calls}\n"
            f"matches:     {s.matches}\n"
            f"removals:    {s.removals}\n"
        )