import errno

import pytest

from steppipe.demo import (
    DRIVER_SOURCE_ID,
    CallbackStats,
    DriverPayload,
    build_test_node_chain,
    main,
    make_die_temp_measurement,
    run_subscription,
    run_throughput,
)
from steppipe.measurement import Timestamp
from steppipe.proc_mgr import ProcessorManager
from steppipe.sample_pool import PoolExhaustedError, SamplePool
from steppipe.units import CType, ExtTemperature, MesType, SIUnit


def test_payload_round_trip():
    payload = DriverPayload(timestamp=1234, temp_c=32.0)
    data = payload.to_bytes()
    assert len(data) == DriverPayload.SIZE
    assert DriverPayload.from_bytes(data) == payload


def test_make_measurement_header_and_payload():
    pool = SamplePool()
    mes = make_die_temp_measurement(pool)
    h = mes.header
    assert h.base_type == MesType.TEMPERATURE
    assert h.ext_type == ExtTemperature.DIE
    assert h.timestamp == Timestamp.UPTIME_MS_32
    assert h.si_unit == SIUnit.DEGREE_CELSIUS
    assert h.ctype == CType.IEEE754_FLOAT32
    assert h.len == DriverPayload.SIZE
    assert h.sourceid == DRIVER_SOURCE_ID
    assert DriverPayload.from_bytes(mes.payload).temp_c == 32.0
    assert mes.free_after_use is True
    assert pool.stats.pool_alloc_calls == 1
    assert h.payload_size() <= h.len


def test_make_measurement_pool_exhausted():
    with pytest.raises(PoolExhaustedError):
        make_die_temp_measurement(SamplePool(size=8))


def test_chain_structure_and_init():
    stats = CallbackStats()
    root = build_test_node_chain(stats)
    names = [n.name for n in root]
    assert names == ["Root processor node", "2nd processor node", "3rd processor node"]
    assert len(root.filters) == 3
    mgr = ProcessorManager()
    mgr.register(root, 0)
    assert stats.init == 3
    assert stats.error == 0


def test_filter_chain_selection():
    pool = SamplePool()
    root = build_test_node_chain(CallbackStats())
    die = make_die_temp_measurement(pool)
    assert root.filters.evaluate(die) is True

    ambient = make_die_temp_measurement(pool)
    ambient.header.ext_type = ExtTemperature.AMBIENT
    assert root.filters.evaluate(ambient) is False

    undefined = make_die_temp_measurement(pool)
    undefined.header.ext_type = ExtTemperature.UNDEFINED
    assert root.filters.evaluate(undefined) is True

    no_ts = make_die_temp_measurement(pool)
    no_ts.header.timestamp = Timestamp.NONE
    assert root.filters.evaluate(no_ts) is False


def test_process_runs_whole_chain():
    pool = SamplePool()
    stats = CallbackStats()
    mgr = ProcessorManager(pool=pool)
    mgr.register(build_test_node_chain(stats), 0)
    mes = make_die_temp_measurement(pool)
    assert mgr.process(mes) == 1
    assert stats.matched == 1
    assert stats.start == 1
    assert stats.run == 3
    assert stats.stop == 1
    assert stats.error == 0
    assert DriverPayload.from_bytes(mes.payload).temp_c == pytest.approx(320.0)
    assert pool.bytes_alloc() == 0


def test_exec_rejects_non_die_measurement():
    stats = CallbackStats()
    root = build_test_node_chain(stats)
    mes = make_die_temp_measurement(SamplePool())
    mes.header.ext_type = ExtTemperature.AMBIENT
    assert root.exec_handler(mes, 0, 0) == -errno.EINVAL
    assert stats.run == 0
    assert DriverPayload.from_bytes(mes.payload).temp_c == 32.0


def test_run_subscription():
    stats, received = run_subscription(3)
    assert len(received) == 3
    assert all(handle == 0 for handle, _ in received)
    assert all(p.temp_c == pytest.approx(320.0) for _, p in received)
    assert stats.matched == 3
    assert stats.run == 9
    assert stats.init == 3


def test_run_subscription_rejects_zero():
    with pytest.raises(ValueError):
        run_subscription(0)


def test_run_throughput_pool_balanced():
    total_ns, pool = run_throughput(20)
    assert total_ns >= 0
    assert pool.stats.pool_alloc_calls == 20
    assert pool.stats.pool_free_calls == 20
    assert pool.bytes_alloc() == 0
    assert pool.stats.bytes_alloc_total == pool.stats.bytes_freed_total


def test_run_throughput_rejects_zero():
    with pytest.raises(ValueError):
        run_throughput(0)


def test_main_throughput(capsys):
    assert main(["throughput", "--count", "5"]) == 0
    out = capsys.readouterr().out
    assert "Processed 5 measurements:" in out
    assert "pool_alloc_calls:  5" in out


def test_main_subscription(capsys):
    assert main(["subscription", "--count", "2"]) == 0
    out = capsys.readouterr().out
    assert out.count("Die temp:") == 2
    assert "Callback errors: 0" in out