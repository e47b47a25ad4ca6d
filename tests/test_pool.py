"""
Unit tests for the bounded worker pool shared by both pipeline stages.
"""

import threading
import time

import pytest

from k8slse.modules.pool import WorkerPool, pool_size


def test_pool_size_is_capped_by_ceiling_and_items():
    assert pool_size(16, 3) == 3
    assert pool_size(2, 10) == 2
    assert pool_size(4, 0) == 0


def test_every_item_processed_once():
    pool = WorkerPool(name="t", worker=lambda x: x * 2, workers=4, queue_size=2)
    results = []

    started = pool.run(list(range(50)), results.append)

    assert started == 4
    assert sorted(results) == [x * 2 for x in range(50)]


def test_none_results_are_not_collected():
    pool = WorkerPool(name="t", worker=lambda x: x if x % 2 else None, workers=3, queue_size=1)
    results = []

    pool.run(list(range(10)), results.append)

    assert sorted(results) == [1, 3, 5, 7, 9]


def test_empty_input_starts_no_workers():
    called = []
    pool = WorkerPool(name="t", worker=called.append, workers=4, queue_size=1)

    assert pool.run([], called.append) == 0
    assert called == []


def test_worker_exception_does_not_stop_the_pool():
    failed = []

    def worker(x):
        if x == 3:
            raise RuntimeError("boom")
        return x

    pool = WorkerPool(
        name="t", worker=worker, workers=2, queue_size=1,
        on_error=lambda item, exc: failed.append((item, str(exc))),
    )
    results = []
    pool.run([1, 2, 3, 4, 5], results.append)

    assert sorted(results) == [1, 2, 4, 5]
    assert failed == [(3, "boom")]


def test_collect_runs_on_calling_thread():
    threads = set()
    pool = WorkerPool(name="t", worker=lambda x: x, workers=4, queue_size=1)

    pool.run(list(range(20)), lambda _: threads.add(threading.current_thread()))

    assert threads == {threading.current_thread()}


def test_concurrency_never_exceeds_ceiling():
    lock = threading.Lock()
    active = 0
    peak = 0

    def worker(x):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1
        return x

    pool = WorkerPool(name="t", worker=worker, workers=3, queue_size=2)
    pool.run(list(range(15)), lambda _: None)

    assert 1 <= peak <= 3


def test_rejects_zero_workers():
    with pytest.raises(ValueError):
        WorkerPool(name="t", worker=lambda x: x, workers=0, queue_size=1)
