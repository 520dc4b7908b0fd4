"""Pool that hands out measurements and tracks the memory they use."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .measurement import Measurement, MeasurementHeader

__all__ = [
    "DEFAULT_POOL_SIZE",
    "DEFAULT_RECORD_OVERHEAD",
    "PoolExhaustedError",
    "PoolStats",
    "SamplePool",
]

DEFAULT_POOL_SIZE = 4096
#: Bytes each allocation costs beyond its payload.
DEFAULT_RECORD_OVERHEAD = 32


class PoolExhaustedError(MemoryError):
    """The pool has no room for the requested measurement."""


@dataclass
class PoolStats:
    """Allocation counters for a sample pool."""

    bytes_alloc: int = 0
    bytes_alloc_total: int = 0
    pool_free_calls: int = 0
    bytes_freed_total: int = 0
    pool_alloc_calls: int = 0


class SamplePool:
    """Allocates measurements from a fixed memory budget kept in 8-byte blocks."""

    def __init__(
        self,
        size: int = DEFAULT_POOL_SIZE,
        record_overhead: int = DEFAULT_RECORD_OVERHEAD,
    ) -> None:
        self.size = size
        self.record_overhead = record_overhead
        self.stats = PoolStats()
        self._lock = threading.Lock()

    def _block_len(self, payload_len: int) -> int:
        raw = payload_len + self.record_overhead
        return raw + (8 - raw % 8)

    def alloc(self, size: int) -> Measurement:
        """Return a zeroed measurement with a payload of ``size`` bytes."""
        if not 0 <= size <= 0xFFFF:
            raise ValueError(f"payload size {size} out of range 0..65535")
        with self._lock:
            self.stats.pool_alloc_calls += 1
            length = self._block_len(size)
            if self.stats.bytes_alloc + length > self.size:
                raise PoolExhaustedError(
                    f"no room for {size} byte payload "
                    f"({self.stats.bytes_alloc} of {self.size} bytes in use)"
                )
            self.stats.bytes_alloc += length
            self.stats.bytes_alloc_total += length
            return Measurement(
                header=MeasurementHeader(len=size),
                payload=bytearray(size),
                free_after_use=True,
            )

    def free(self, measurement: Measurement) -> None:
        """Return a measurement's memory to the pool."""
        with self._lock:
            self.stats.pool_free_calls += 1
            length = self._block_len(int(measurement.header.len))
            self.stats.bytes_alloc -= length
            self.stats.bytes_freed_total += length

    def bytes_alloc(self) -> int:
        """Bytes currently allocated."""
        return self.stats.bytes_alloc

    def format_stats(self) -> str:
        """Return the allocation counters as text."""
        s = self.stats
        return (
            f"bytes_alloc (cur): {s.bytes_alloc}\n"
            f"bytes_alloc_total: {s.bytes_alloc_total}\n"
            f"bytes_freed_total: {s.bytes_freed_total}\n"
            f"pool_free_calls:   {s.pool_free_calls}\n"
            f"pool_alloc_calls:  {s.pool_alloc_calls}\n"
        )