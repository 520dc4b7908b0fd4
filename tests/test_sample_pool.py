import pytest

from steppipe.sample_pool import PoolExhaustedError, SamplePool


def test_alloc_returns_zeroed_measurement():
    pool = SamplePool()
    mes = pool.alloc(8)
    assert mes.header.len == 8
    assert mes.payload == bytearray(8)
    assert mes.free_after_use is True
    assert mes.header.filter_bits == 0


def test_alloc_free_round_trip():
    pool = SamplePool()
    items = [pool.alloc(n) for n in (0, 5, 16, 100)]
    assert pool.bytes_alloc() > 0
    for mes in items:
        pool.free(mes)
    assert pool.bytes_alloc() == 0
    assert pool.stats.bytes_alloc_total == pool.stats.bytes_freed_total
    assert pool.stats.pool_alloc_calls == 4
    assert pool.stats.pool_free_calls == 4


@pytest.mark.parametrize("size", [0, 1, 7, 8, 13, 64])
def test_allocation_is_block_aligned(size):
    pool = SamplePool(record_overhead=24)
    pool.alloc(size)
    used = pool.bytes_alloc()
    assert used % 8 == 0
    assert used > size + 24


def test_exact_multiple_still_gets_extra_block():
    pool = SamplePool(record_overhead=0)
    pool.alloc(8)
    assert pool.bytes_alloc() == 16


def test_exhaustion_raises():
    pool = SamplePool(size=64, record_overhead=0)
    pool.alloc(40)
    with pytest.raises(PoolExhaustedError):
        pool.alloc(40)
    assert pool.stats.pool_alloc_calls == 2


def test_size_out_of_range():
    pool = SamplePool()
    with pytest.raises(ValueError):
        pool.alloc(0x10000)
    with pytest.raises(ValueError):
        pool.alloc(-1)


def test_format_stats():
    pool = SamplePool()
    mes = pool.alloc(4)
    pool.free(mes)
    text = pool.format_stats()
    assert "bytes_alloc (cur): 0\n" in text
    assert "pool_alloc_calls:  1\n" in text
    assert "pool_free_calls:   1\n" in text