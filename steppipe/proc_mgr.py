"""Processor manager: a priority-ordered registry of node chains that
measurements are evaluated against and run through."""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .cache import FilterCache
from .filter import FilterChainError
from .measurement import Measurement
from .node import Node
from .sample_pool import SamplePool

__all__ = [
    "DEFAULT_NODE_LIMIT",
    "DEFAULT_CALLBACK_LIMIT",
    "RegistryFullError",
    "InvalidHandleError",
    "ProcessorManager",
]

_log = logging.getLogger(__name__)

DEFAULT_NODE_LIMIT = 8
DEFAULT_CALLBACK_LIMIT = 8

SubscriberCallback = Callable[[Measurement, int, Any], Any]


class RegistryFullError(MemoryError):
    """No room left for another node record or subscriber callback."""


class InvalidHandleError(LookupError):
    """The handle does not refer to a registered node chain."""


@dataclass
class _Subscriber:
    callback: SubscriberCallback | None
    user_data: Any


@dataclass(eq=False)
class _NodeRecord:
    node: Node
    handle: int
    priority: int
    enabled: bool = True
    subscribers: list[_Subscriber] = field(default_factory=list)
    runtime_ns: int = 0
    runs: int = 0


def _call_handler(
    handler: Callable[..., Any] | None,
    node: Node,
    measurement: Measurement,
    handle: int,
    inst: int,
) -> None:
    if handler is None:
        return
    rc = handler(measurement, handle, inst)
    if rc and node.error_handler is not None:
        node.error_handler(measurement, handle, inst, rc)


class ProcessorManager:
    """Registry of node chains, evaluated in priority order for each measurement.

    Measurements handed to :meth:`put` are processed on a background worker
    thread; :meth:`process` runs one synchronously.
    """

    def __init__(
        self,
        node_limit: int = DEFAULT_NODE_LIMIT,
        callback_limit: int = DEFAULT_CALLBACK_LIMIT,
        cache: FilterCache | None = None,
        pool: SamplePool | None = None,
        instrumentation: bool = False,
    ) -> None:
        if node_limit < 1:
            raise ValueError("node limit must be at least 1")
        self.node_limit = node_limit
        self.callback_limit = callback_limit
        self.cache = cache
        self.pool = pool
        self.instrumentation = instrumentation
        self._lock = threading.RLock()
        self._records: dict[int, _NodeRecord] = {}
        self._order: list[_NodeRecord] = []
        self._handle_counter = 0
        self._callbacks_used = 0
        self._queue: queue.Queue[Measurement | None] = queue.Queue()
        self._worker: threading.Thread | None = None

    @property
    def order(self) -> list[int]:
        """Handles of the registered chains, in evaluation order."""
        with self._lock:
            return [record.handle for record in self._order]

    def _record(self, handle: int) -> _NodeRecord:
        record = self._records.get(handle)
        if record is None:
            raise InvalidHandleError(f"invalid handle: {handle}")
        return record

    def register(self, node: Node, priority: int) -> int:
        """Register a node chain and return its handle.

        Chains with a higher priority are evaluated first; equal priorities
        keep registration order. Each node's init handler runs with the
        node's config, and a nonzero result is passed to its error handler.
        """
        with self._lock:
            if self._handle_counter == self.node_limit:
                _log.error("Registration failed: node limit reached")
                raise RegistryFullError("node limit reached")

            handle = self._handle_counter
            self._handle_counter += 1
            _log.debug("Registering node/chain (handle %d, pri %d)", handle, priority)

            record = _NodeRecord(node=node, handle=handle, priority=priority)
            self._records[handle] = record

            position = next(
                (i for i, r in enumerate(self._order) if priority > r.priority),
                len(self._order),
            )
            self._order.insert(position, record)

            for idx, n in enumerate(node):
                if n.init_handler is None:
                    continue
                rc = n.init_handler(n.config, handle, idx)
                if rc and n.error_handler is not None:
                    n.error_handler(None, handle, idx, rc)

            return handle

    def node_get(self, handle: int, inst: int = 0) -> Node:
        """Return node ``inst`` of the chain registered under ``handle``."""
        record = self._record(handle)
        for idx, node in enumerate(record.node):
            if idx == inst:
                return node
        _log.error("Node instance out of bounds: %d:%d", handle, inst)
        raise IndexError(f"node instance out of bounds: {handle}:{inst}")

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(
                target=self._work, name="proc-mgr", daemon=True
            )
            self._worker.start()

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                try:
                    self.process(item)
                except Exception:
                    _log.exception("Failed to process the current sample.")
            finally:
                self._queue.task_done()

    def put(self, measurement: Measurement) -> None:
        """Queue a measurement for processing on the worker thread."""
        if measurement is None:
            raise ValueError("no measurement given")
        self._ensure_worker()
        self._queue.put(measurement)

    def process(self, measurement: Measurement) -> int:
        """Run a measurement through every enabled matching chain.

        Returns the number of chains that matched. The measurement is
        returned to the pool afterwards if it is marked free-after-use. If
        the last filter-chain evaluation failed, its FilterChainError is
        raised once processing has finished.
        """
        match_count = 0
        error: FilterChainError | None = None
        with self._lock:
            try:
                if not self._order:
                    _log.warning("Measurement lost: no processor node(s) registered")
                    return 0

                for record in list(self._order):
                    if not record.enabled:
                        continue
                    started = time.perf_counter_ns()
                    node = record.node
                    handle = record.handle
                    bits = measurement.header.filter_bits

                    cached = (
                        self.cache.check(bits, handle)
                        if self.cache is not None
                        else None
                    )
                    if cached is not None:
                        match = bool(cached)
                    else:
                        if node.evaluate_handler is not None:
                            match = bool(node.evaluate_handler(measurement, handle, 0))
                        else:
                            try:
                                match = node.filters.evaluate(measurement)
                                error = None
                            except FilterChainError as exc:
                                match = False
                                error = exc
                        if match and node.matched_handler is not None:
                            match = bool(node.matched_handler(measurement, handle, 0))
                        if self.cache is not None:
                            self.cache.add(bits, handle, int(match))

                    self._lock.release()
                    try:
                        if match:
                            self._run_chain(record, measurement)
                            match_count += 1
                    finally:
                        self._lock.acquire()

                    record.runtime_ns += time.perf_counter_ns() - started
                    record.runs += 1

                if match_count == 0:
                    _log.warning("Measurement lost: no processor node(s) matched")
            finally:
                if measurement.free_after_use and self.pool is not None:
                    self.pool.free(measurement)

        if error is not None:
            raise error
        return match_count

    @staticmethod
    def _run_chain(record: _NodeRecord, measurement: Measurement) -> None:
        handle = record.handle
        for idx, n in enumerate(record.node):
            _call_handler(n.start_handler, n, measurement, handle, idx)
            _call_handler(n.exec_handler, n, measurement, handle, idx)
            _call_handler(n.stop_handler, n, measurement, handle, idx)
        for sub in list(record.subscribers):
            if sub.callback is not None:
                sub.callback(measurement, handle, sub.user_data)

    def clear(self) -> None:
        """Remove every registered chain and reset the handle counter."""
        _log.debug("Resetting processor node registry")
        with self._lock:
            if self.cache is not None:
                self.cache.clear()
            self._handle_counter = 0
            self._records.clear()
            self._order.clear()
            self._callbacks_used = 0

    def disable_node(self, handle: int) -> None:
        """Skip the chain registered under ``handle`` during processing."""
        _log.debug("Disabling processor node %d", handle)
        self._record(handle).enabled = False

    def enable_node(self, handle: int) -> None:
        """Resume evaluating the chain registered under ``handle``."""
        _log.debug("Enabling processor node %d", handle)
        self._record(handle).enabled = True

    def subscribe(
        self,
        handle: int,
        callback: SubscriberCallback | None,
        user_data: Any = None,
    ) -> None:
        """Call ``callback(measurement, handle, user_data)`` after the chain runs."""
        with self._lock:
            _log.debug("Subscribing to processor node %d", handle)
            record = self._record(handle)
            if self._callbacks_used >= self.callback_limit:
                _log.error("No more callbacks available: %d", handle)
                raise RegistryFullError("no more callbacks available")
            self._callbacks_used += 1
            record.subscribers.append(_Subscriber(callback, user_data))

    def format_registry(self) -> str:
        """Return a listing of the registered chains in evaluation order."""
        with self._lock:
            lines = ["Processor node registry:"]
            if not self._order:
                lines.append("  empty")
            for record in self._order:
                lines.append(f"{record.handle} (priority {record.priority}):")
                if self.instrumentation:
                    avg = record.runtime_ns // record.runs if record.runs else 0
                    lines.append(
                        f"  Total processing time: {record.runtime_ns} ns "
                        f"({avg} avg, {record.runs} runs)"
                    )
                for inst, n in enumerate(record.node):
                    name = n.name if n.name is not None else "(unnamed)"
                    lines.append(f"  [{inst}] {name}")
            return "\n".join(lines) + "\n"

    def join(self) -> None:
        """Block until every queued measurement has been processed."""
        self._queue.join()

    def close(self) -> None:
        """Finish queued work and stop the worker thread."""
        worker = self._worker
        if worker is not None and worker.is_alive():
            self._queue.put(None)
            worker.join()
        self._worker = None

    def __enter__(self) -> ProcessorManager:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()