"""Unit tests for the process-wide table cache."""

from __future__ import annotations

import threading
import time
import unittest
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from voice_features.features.cache import cache_size, cached, clear_cache


class TestCache(unittest.TestCase):
    def test_builds_once(self) -> None:
        calls = []

        def build() -> np.ndarray:
            calls.append(1)
            return np.ones(3)

        first = cached(("test", "once"), build)
        second = cached(("test", "once"), build)
        self.assertIs(first, second)
        self.assertEqual(len(calls), 1)

    def test_values_are_read_only(self) -> None:
        table = cached(("test", "ro"), lambda: np.zeros(4))
        pair = cached(("test", "pair"), lambda: (np.zeros(2), np.ones(2)))
        self.assertFalse(table.flags.writeable)
        self.assertFalse(pair[0].flags.writeable)
        self.assertFalse(pair[1].flags.writeable)

    def test_concurrent_first_use(self) -> None:
        """Racing threads trigger a single build and see the same object."""
        calls = []
        lock = threading.Lock()

        def slow_build() -> np.ndarray:
            with lock:
                calls.append(1)
            time.sleep(0.05)
            return np.arange(10)

        barrier = threading.Barrier(8)

        def worker(_: int) -> np.ndarray:
            barrier.wait()
            return cached(("test", "race"), slow_build)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(8)))

        self.assertEqual(len(calls), 1)
        self.assertTrue(all(r is results[0] for r in results))

    def test_clear(self) -> None:
        cached(("test", "clear"), lambda: np.zeros(1))
        self.assertGreater(cache_size(), 0)
        clear_cache()
        self.assertEqual(cache_size(), 0)


if __name__ == "__main__":
    unittest.main()
