import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from rangecard.engine.cache import TableCache
from rangecard.errors import CacheConflictError


def test_computes_once_then_hits():
    cache = TableCache()
    calls = []

    def compute():
        calls.append(1)
        return ("table",)

    assert cache.get_or_compute("k", compute) == ("table",)
    assert cache.get_or_compute("k", compute) == ("table",)
    assert len(calls) == 1
    stats = cache.stats()
    assert (stats.entries, stats.computations, stats.hits) == (1, 1, 1)


def test_concurrent_requests_share_one_computation():
    """N workers asking for one key: exactly one computation, N identical reads."""
    cache = TableCache()
    n = 8
    barrier = threading.Barrier(n)
    calls = []
    calls_lock = threading.Lock()

    def compute():
        with calls_lock:
            calls.append(threading.get_ident())
        time.sleep(0.1)
        return object()

    def worker(_):
        barrier.wait()
        return cache.get_or_compute("shared", compute)

    with ThreadPoolExecutor(max_workers=n) as pool:
        results = list(pool.map(worker, range(n)))

    assert len(calls) == 1
    assert all(r is results[0] for r in results)
    stats = cache.stats()
    assert stats.computations == 1
    assert stats.hits == n - 1


def test_distinct_keys_compute_independently():
    cache = TableCache()
    assert cache.get_or_compute("a", lambda: 1) == 1
    assert cache.get_or_compute("b", lambda: 2) == 2
    assert len(cache) == 2
    assert "a" in cache
    assert cache.get("missing") is None


def test_failed_build_is_not_cached_and_can_retry():
    cache = TableCache()

    def boom():
        raise RuntimeError("integrator exploded")

    with pytest.raises(RuntimeError):
        cache.get_or_compute("k", boom)
    assert "k" not in cache

    assert cache.get_or_compute("k", lambda: 42) == 42
    assert cache.stats().computations == 1


def test_waiters_retry_after_builder_fails():
    cache = TableCache()
    started = threading.Event()
    attempts = []

    def failing():
        attempts.append("fail")
        started.set()
        time.sleep(0.1)
        raise RuntimeError("first build fails")

    def succeeding():
        attempts.append("ok")
        return "table"

    with ThreadPoolExecutor(max_workers=2) as pool:
        first = pool.submit(cache.get_or_compute, "k", failing)
        started.wait()
        second = pool.submit(cache.get_or_compute, "k", succeeding)
        with pytest.raises(RuntimeError):
            first.result()
        assert second.result() == "table"

    assert attempts == ["fail", "ok"]


def test_write_once():
    cache = TableCache()
    cache.put("k", (1, 2, 3))
    cache.put("k", (1, 2, 3))
    with pytest.raises(CacheConflictError):
        cache.put("k", (1, 2, 4))
    assert cache.get("k") == (1, 2, 3)
