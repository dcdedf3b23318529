"""Tests for the shared success counter."""

import threading

from collab_bench.counter import SuccessCounter


class TestSuccessCounter:
    def test_starts_at_zero(self):
        assert SuccessCounter().value == 0

    def test_counts_each_index_once(self):
        counter = SuccessCounter()
        assert counter.record_success(3) is True
        assert counter.record_success(3) is False
        assert counter.value == 1
        assert counter.record_success(4) is True
        assert counter.value == 2

    def test_concurrent_threads(self):
        counter = SuccessCounter()

        def worker(start):
            for i in range(start, start + 250):
                counter.record_success(i)

        threads = [threading.Thread(target=worker, args=(n * 250,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert counter.value == 2000
