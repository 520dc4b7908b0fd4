"""Example pipelines: a die-temperature subscription loop and a throughput run."""

from __future__ import annotations

import argparse
import errno
import struct
import sys
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass

from .filter import Filter, FilterChain, FilterOp
from .measurement import (
    MASK_BASE_TYPE,
    MASK_EXT_TYPE_POS,
    MASK_FULL_TYPE,
    MASK_TIMESTAMP,
    MASK_TIMESTAMP_POS,
    Compression,
    DataFormat,
    Encoding,
    Measurement,
    MeasurementHeader,
    Timestamp,
    VectorSize,
)
from .node import Node
from .proc_mgr import ProcessorManager
from .sample_pool import PoolExhaustedError, SamplePool
from .units import CType, ExtTemperature, MesType, SIScale, SIUnit

__all__ = [
    "DRIVER_SOURCE_ID",
    "THROUGHPUT_MESSAGES",
    "CallbackStats",
    "DriverPayload",
    "make_die_temp_measurement",
    "build_test_node_chain",
    "run_subscription",
    "run_throughput",
    "main",
]

DRIVER_SOURCE_ID = 2
THROUGHPUT_MESSAGES = 1000

_WORD = 0xFFFFFFFF
_START = time.monotonic()
_ACCEL_FORMAT = struct.Struct("<Ifff")


def _uptime_ms() -> int:
    return int((time.monotonic() - _START) * 1000) & _WORD


@dataclass
class CallbackStats:
    """How many times each node callback has fired."""

    init: int = 0
    evaluate: int = 0
    matched: int = 0
    start: int = 0
    run: int = 0
    stop: int = 0
    error: int = 0


@dataclass
class DriverPayload:
    """Die temperature payload: a 32-bit ms timestamp and a float32 value."""

    timestamp: int = 0
    temp_c: float = 0.0

    _FORMAT = struct.Struct("<If")
    SIZE = _FORMAT.size

    def to_bytes(self) -> bytes:
        """Pack the payload in little-endian layout."""
        return self._FORMAT.pack(self.timestamp & _WORD, self.temp_c)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> DriverPayload:
        """Unpack a payload from the start of ``data``."""
        timestamp, temp_c = cls._FORMAT.unpack_from(bytes(data))
        return cls(timestamp=timestamp, temp_c=temp_c)


def _driver_header() -> MeasurementHeader:
    return MeasurementHeader(
        base_type=MesType.TEMPERATURE,
        ext_type=ExtTemperature.DIE,
        data_format=DataFormat.NONE,
        encoding=Encoding.NONE,
        compression=Compression.NONE,
        timestamp=Timestamp.UPTIME_MS_32,
        si_unit=SIUnit.DEGREE_CELSIUS,
        ctype=CType.IEEE754_FLOAT32,
        scale_factor=SIScale.NONE,
        len=DriverPayload.SIZE,
        fragment=0,
        sourceid=DRIVER_SOURCE_ID,
    )


def make_die_temp_measurement(pool: SamplePool) -> Measurement:
    """Allocate a die temperature measurement of 32 degrees C from ``pool``."""
    mes = pool.alloc(DriverPayload.SIZE)
    mes.header = _driver_header()
    mes.payload[:] = DriverPayload(timestamp=_uptime_ms(), temp_c=32.0).to_bytes()
    return mes


@dataclass
class _NodeConfig:
    mult: float = 10.0


def build_test_node_chain(stats: CallbackStats) -> Node:
    """Build the three-node die temperature chain, counting callbacks in ``stats``."""
    nodes: list[Node] = []

    def node_init(cfg, handle, inst):
        stats.init += 1
        return 0

    def node_matched(mes, handle, inst):
        stats.matched += 1
        return True

    def node_start(mes, handle, inst):
        stats.start += 1
        return 0

    def node_exec(mes, handle, inst):
        if mes.header.ext_type != ExtTemperature.DIE:
            return -errno.EINVAL
        if not 0 <= inst < len(nodes):
            return -errno.EINVAL
        node = nodes[inst]
        mult = node.config.mult if node.config is not None else 1.0
        payload = DriverPayload.from_bytes(mes.payload)
        payload.temp_c *= mult
        mes.payload[: DriverPayload.SIZE] = payload.to_bytes()
        stats.run += 1
        return 0

    def node_stop(mes, handle, inst):
        stats.stop += 1
        return 0

    def node_error(mes, handle, inst, error):
        stats.error += 1

    full_type_ignore = ~MASK_FULL_TYPE & _WORD
    filters = FilterChain(
        [
            Filter(
                op=FilterOp.IS,
                match=int(MesType.TEMPERATURE),
                ignore_mask=full_type_ignore,
            ),
            Filter(
                op=FilterOp.OR,
                match=int(MesType.TEMPERATURE)
                + (int(ExtTemperature.DIE) << MASK_EXT_TYPE_POS),
                ignore_mask=full_type_ignore,
            ),
            Filter(
                op=FilterOp.AND,
                match=int(Timestamp.UPTIME_MS_32) << MASK_TIMESTAMP_POS,
                ignore_mask=~MASK_TIMESTAMP & _WORD,
            ),
        ]
    )

    third = Node(
        name="3rd processor node",
        init_handler=node_init,
        exec_handler=node_exec,
        error_handler=node_error,
    )
    second = Node(
        name="2nd processor node",
        init_handler=node_init,
        exec_handler=node_exec,
        error_handler=node_error,
        config=_NodeConfig(mult=10.0),
        next=third,
    )
    root = Node(
        name="Root processor node",
        filters=filters,
        init_handler=node_init,
        matched_handler=node_matched,
        start_handler=node_start,
        exec_handler=node_exec,
        stop_handler=node_stop,
        error_handler=node_error,
        next=second,
    )
    nodes.extend(root)
    return root


def run_subscription(count: int) -> tuple[CallbackStats, list[tuple[int, DriverPayload]]]:
    """Feed ``count`` die temperature measurements through the test chain.

    Each subscriber callback queues the next measurement until ``count``
    have been delivered. Returns the callback counters and the
    ``(handle, payload)`` pairs received by the subscriber.
    """
    if count < 1:
        raise ValueError("count must be at least 1")

    stats = CallbackStats()
    received: list[tuple[int, DriverPayload]] = []
    pool = SamplePool()
    lock = threading.Lock()

    with ProcessorManager(pool=pool) as manager:

        def on_node_completed(mes, handle, user):
            with lock:
                received.append((handle, DriverPayload.from_bytes(mes.payload)))
                more = len(received) < count
            if more:
                manager.put(make_die_temp_measurement(pool))

        handle = manager.register(build_test_node_chain(stats), 0)
        manager.subscribe(handle, on_node_completed, None)
        manager.put(make_die_temp_measurement(pool))
        manager.join()

    return stats, received


def _accel_header() -> MeasurementHeader:
    return MeasurementHeader(
        base_type=MesType.ACCELERATION,
        data_format=DataFormat.NONE,
        encoding=Encoding.NONE,
        compression=Compression.NONE,
        timestamp=Timestamp.UPTIME_MS_32,
        si_unit=SIUnit.METER_PER_SECOND_2,
        ctype=CType.IEEE754_FLOAT32,
        scale_factor=SIScale.NONE,
        vec_sz=VectorSize.SZ_3,
        len=_ACCEL_FORMAT.size,
    )


def run_throughput(count: int) -> tuple[int, SamplePool]:
    """Publish ``count`` accelerometer measurements through a minimal node.

    Returns the nanoseconds spent allocating and publishing, and the pool
    the measurements came from.
    """
    if count < 1:
        raise ValueError("count must be at least 1")

    pool = SamplePool()
    total_ns = 0

    with ProcessorManager(pool=pool) as manager:

        def node_init(cfg, handle, inst):
            return 0

        def node_exec(mes, handle, inst):
            try:
                manager.node_get(handle, inst)
            except (LookupError, IndexError):
                return -errno.EINVAL
            return 0

        node = Node(
            name="Accelerometer node",
            filters=FilterChain(
                [
                    Filter(
                        op=FilterOp.IS,
                        match=int(MesType.ACCELERATION),
                        ignore_mask=~MASK_BASE_TYPE & _WORD,
                    )
                ]
            ),
            init_handler=node_init,
            exec_handler=node_exec,
        )
        manager.register(node, 0)

        header = _accel_header()
        for _ in range(count):
            started = time.perf_counter_ns()
            try:
                mes = pool.alloc(header.len)
            except PoolExhaustedError:
                # Let the worker drain the queue, then try once more.
                manager.join()
                mes = pool.alloc(header.len)
            mes.header = MeasurementHeader.from_bits(
                header.filter_bits, header.unit_bits, header.srclen_bits
            )
            mes.payload[:] = _ACCEL_FORMAT.pack(_uptime_ms(), 0.0, 0.0, 0.0)
            manager.put(mes)
            total_ns += time.perf_counter_ns() - started

        manager.join()

    return total_ns, pool


def main(argv: Sequence[str] | None = None) -> int:
    """Run one of the example pipelines and print its results."""
    parser = argparse.ArgumentParser(prog="steppipe-demo")
    sub = parser.add_subparsers(dest="command", required=True)
    p_sub = sub.add_parser("subscription", help="die temperature subscription loop")
    p_sub.add_argument("--count", type=int, default=10)
    p_thr = sub.add_parser("throughput", help="measure pipeline throughput")
    p_thr.add_argument("--count", type=int, default=THROUGHPUT_MESSAGES)
    args = parser.parse_args(argv)

    if args.count < 1:
        parser.error("--count must be at least 1")

    out = sys.stdout
    if args.command == "subscription":
        stats, received = run_subscription(args.count)
        for handle, payload in received:
            out.write(f"Receiving subscription callback from node {handle}\n")
            out.write(
                f"Die temp: {payload.temp_c:10.6f} [C] at {payload.timestamp} [ms]\n"
            )
        out.write(f"Callback errors: {stats.error}\n")
        return 0

    total_ns, pool = run_throughput(args.count)
    per_sample_ns = total_ns / args.count
    rate = int(1_000_000_000 / per_sample_ns) if per_sample_ns else 0
    out.write("\n")
    out.write(f"Processed {args.count} measurements:\n\n")
    out.write(f"total time: {total_ns // 1000} us\n")
    out.write(f"per sample: {int(per_sample_ns // 1000)} us\n")
    out.write(f"mes/s:      {rate}\n")
    out.write("\n")
    out.write("Sample pool statistics:\n\n")
    out.write(pool.format_stats())
    out.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())