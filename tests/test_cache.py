import pytest

from steppipe.cache import FilterCache


def test_check_on_empty_cache_misses():
    cache = FilterCache(depth=4)
    assert cache.check(0x24, 0) is None
    assert cache.stats.check_calls == 1
    assert cache.stats.matches == 0


def test_add_then_check_returns_result():
    cache = FilterCache(depth=4)
    cache.add(0x24, 3, 1)
    cache.add(0x24, 4, 0)
    assert cache.check(0x24, 3) == 1
    assert cache.check(0x24, 4) == 0
    assert cache.check(0x25, 3) is None
    assert cache.stats.matches == 2


def test_least_recently_used_is_evicted():
    cache = FilterCache(depth=2)
    cache.add(0xA, 0, 1)
    cache.add(0xB, 0, 1)
    assert cache.check(0xA, 0) == 1
    cache.add(0xC, 0, 1)
    assert cache.check(0xB, 0) is None
    assert cache.check(0xA, 0) == 1
    assert cache.check(0xC, 0) == 1
    assert cache.stats.removals == 1


def test_clear_empties_cache():
    cache = FilterCache(depth=3)
    cache.add(1, 1, 1)
    cache.clear()
    assert cache.check(1, 1) is None
    assert all(r is None for r in cache.records)
    assert cache.stats.clear_calls == 1


def test_custom_clock_sets_last_used():
    times = iter([100, 200])
    cache = FilterCache(depth=1, clock=lambda: next(times))
    cache.add(5, 6, 1)
    assert cache.records[0].last_used == 100
    cache.check(5, 6)
    assert cache.records[0].last_used == 200


def test_format_lists_every_slot():
    cache = FilterCache(depth=3, clock=lambda: 7)
    cache.add(0x24, 2, 1)
    lines = cache.format().splitlines()
    assert len(lines) == 3
    assert lines[0] == "0000: 0x00000024 0x02 1 (last_used: 7)"
    assert lines[1] == "0001: empty"


def test_format_stats():
    cache = FilterCache(depth=2)
    cache.add(1, 1, 1)
    cache.check(1, 1)
    text = cache.format_stats()
    assert "add calls:   1\n" in text
    assert "check calls: 1\n" in text
    assert "matches:     1\n" in text


def test_invalid_depth():
    with pytest.raises(ValueError):
        FilterCache(depth=0)