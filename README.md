# steppipe

A small pipeline for sensor measurements. Every measurement has a compact
three-word header: a filter word (base type, extended type, flags), a unit word
(SI unit, scale factor, C type) and a source/length word. Processor nodes
select measurements through filter chains that are evaluated against the
filter word. A processor manager runs each matching node chain in priority
order.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

- `steppipe.units`: base measurement types (`MesType`), extended types
  (`ExtColor`, `ExtLight`, `ExtOrientation`, `ExtTemperature`), C types
  (`CType`), SI units (`SIUnit`) and scales (`SIScale`). `ctype_size(ctype)`
  returns the byte size of a fixed-size C type, or 0 when it can't be known.
- `steppipe.measurement`: `MeasurementHeader` holds every header field. Its
  properties `filter_bits`, `unit_bits`, `srclen_bits` and `flags_bits` give
  the packed words, and `MeasurementHeader.from_bits(filter_bits, unit_bits,
  srclen_bits)` unpacks them. `payload_size()` returns the minimum payload
  size the header implies (sample count, C type, vector size, timestamp and
  BASE64/BASE45 encoding), or `None` when it can't be determined.
  `Measurement` pairs a header with a `bytearray` payload;
  `Measurement.validate()` raises `PayloadSpaceError` when the header's
  length is below the minimum, and `Measurement.format()` returns a text dump.
  The module also defines the `MASK_*` constants for the filter word and the
  enums `DataFormat`, `Encoding`, `Compression`, `Timestamp`, `Fragment` and
  `VectorSize`, with `timestamp_size(timestamp)`.
- `steppipe.filter`: `Filter` (an exact match with an optional ignore mask)
  and `FilterChain`, combined with the operators in `FilterOp` (IS, NOT, AND,
  AND NOT, OR, OR NOT, XOR). An empty chain accepts every measurement; a
  chain that doesn't begin with IS or NOT raises `FilterChainError`.
- `steppipe.cache`: `FilterCache`, a fixed-depth least-recently-used cache of
  match results keyed by filter word and node handle, with counters in
  `CacheStats`.
- `steppipe.node`: `Node`, a processor node with optional init, evaluate,
  matched, start, exec, stop and error handlers, linked into a chain through
  `next`. Iterating a node yields it and every node after it;
  `format_nodes(node)` describes a chain.
- `steppipe.sample_pool`: `SamplePool` allocates zeroed measurements from a
  fixed byte budget, counted in 8-byte blocks, and raises
  `PoolExhaustedError` when it runs out. `free()` returns the bytes and
  `format_stats()` lists the counters.
- `steppipe.proc_mgr`: `ProcessorManager`, the registry of node chains.
  `register(node, priority)` returns a handle (higher priority runs first)
  and raises `RegistryFullError` past the node limit. `process()` runs a
  measurement synchronously and returns how many chains matched; `put()`
  queues it to a worker thread, `join()` waits for the queue and `close()`
  (or leaving a `with` block) stops the worker. `subscribe(handle, callback,
  user_data)` adds a callback run after the chain handles a measurement.
  `enable_node`, `disable_node`, `node_get` and `clear` manage the registry;
  unknown handles raise `InvalidHandleError`. Pass `cache=FilterCache()` to
  cache match results, and `pool=` to free pooled measurements after use.
- `steppipe.demo`: two example pipelines, `run_subscription(count)` and
  `run_throughput(count)`, and the `steppipe-demo` command.

## Example

```python
from steppipe.filter import Filter, FilterChain, FilterOp
from steppipe.measurement import Measurement, MeasurementHeader
from steppipe.node import Node
from steppipe.proc_mgr import ProcessorManager
from steppipe.units import MesType

seen = []

node = Node(
    name="Temperature node",
    filters=FilterChain([
        Filter(op=FilterOp.IS, match=MesType.TEMPERATURE, ignore_mask=0xFFFFFF00),
    ]),
    exec_handler=lambda mes, handle, inst: seen.append(mes) or 0,
)

with ProcessorManager() as pm:
    handle = pm.register(node, 0)
    header = MeasurementHeader(base_type=MesType.TEMPERATURE)
    matched = pm.process(Measurement(header=header))
    print(matched)  # 1
    print(pm.format_registry())
```

## Demo

Run the die-temperature subscription loop, where each subscriber callback
queues the next measurement:

```
steppipe-demo subscription --count 10
```

Measure how fast measurements can be allocated and published:

```
steppipe-demo throughput --count 1000
```

## Limits

- Payloads are plain bytes. The package does not encode or decode BASE64,
  BASE45, CBOR or LZ4 payloads; those flags only affect `payload_size()`
  (encoding) or are carried in the header (format, compression).
- `payload_size()` does not account for data format or compression.
- Nothing is stored or sent anywhere: measurements live in memory, and the
  demo produces its own sample data rather than reading a sensor.