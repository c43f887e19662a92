"""
Tests for the in-memory report cache.

A fake clock stands in for time.time so expiry is deterministic.
"""

import threading

from bias_lens.result_cache import ResultCache
from bias_lens.schemas import AnalysisReport


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def report(score: int = 50) -> AnalysisReport:
    return AnalysisReport(polarization_score=score, summary=f"Report {score}.")


def test_get_miss_and_hit():
    cache = ResultCache()
    assert cache.get("missing") is None

    cache.put("key", report(70))
    assert cache.get("key").polarization_score == 70
    assert "key" in cache


def test_capacity_evicts_first_inserted():
    cache = ResultCache(clock=FakeClock())

    for i in range(101):
        cache.put(f"key-{i}", report(i % 100))

    assert len(cache) == 100
    assert "key-0" not in cache
    assert "key-1" in cache
    assert "key-100" in cache


def test_reads_do_not_change_eviction_order():
    cache = ResultCache(capacity=2, clock=FakeClock())
    cache.put("a", report())
    cache.put("b", report())
    cache.get("a")

    cache.put("c", report())

    assert cache.keys() == ["b", "c"]


def test_reput_counts_as_new_insertion():
    cache = ResultCache(capacity=2, clock=FakeClock())
    cache.put("a", report(10))
    cache.put("b", report(20))
    cache.put("a", report(30))

    cache.put("c", report(40))

    assert cache.keys() == ["a", "c"]
    assert cache.get("a").polarization_score == 30


def test_expired_entry_removed_on_next_put():
    clock = FakeClock()
    cache = ResultCache(clock=clock)
    cache.put("old", report())

    clock.advance(31 * 60)
    cache.put("new", report())

    assert "old" not in cache
    assert "new" in cache
    assert len(cache) == 1


def test_fresh_entry_survives_put():
    clock = FakeClock()
    cache = ResultCache(clock=clock)
    cache.put("recent", report())

    clock.advance(29 * 60)
    cache.put("new", report())

    assert "recent" in cache


def test_stale_entry_still_readable_until_next_write():
    clock = FakeClock()
    cache = ResultCache(clock=clock)
    cache.put("old", report(80))

    clock.advance(31 * 60)

    assert cache.get("old").polarization_score == 80
    cache.evict()
    assert cache.get("old") is None


def test_clear():
    cache = ResultCache()
    cache.put("a", report())
    cache.put("b", report())

    assert cache.clear() == 2
    assert len(cache) == 0


def test_concurrent_puts_respect_capacity():
    cache = ResultCache(capacity=100)

    def writer(worker: int):
        for i in range(200):
            cache.put(f"w{worker}-{i}", report())

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 100
