"""Tests for per-product stock locks."""

import threading

from marketplace.product import locks
from marketplace.product.locks import stock_locks


class TestStockLocks:
    def test_locks_are_released_after_block(self):
        with stock_locks(["b", "a"]):
            pass
        acquired = threading.Event()

        def worker():
            with stock_locks(["a", "b"]):
                acquired.set()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join(timeout=2)
        assert acquired.is_set()

    def test_locks_released_when_block_raises(self):
        try:
            with stock_locks(["x"]):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        with stock_locks(["x"]):
            pass

    def test_duplicate_ids_are_locked_once(self):
        with stock_locks(["dup", "dup"]):
            pass

    def test_overlapping_sets_in_opposite_order_do_not_deadlock(self):
        done = []
        start = threading.Barrier(2)

        def worker(ids):
            start.wait()
            for _ in range(200):
                with stock_locks(ids):
                    pass
            done.append(ids)

        threads = [
            threading.Thread(target=worker, args=(["p1", "p2", "p3"],)),
            threading.Thread(target=worker, args=(["p3", "p2", "p1"],)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(done) == 2

    def test_other_product_is_not_blocked(self):
        entered = threading.Event()

        def worker():
            with stock_locks(["other"]):
                entered.set()

        with stock_locks(["held"]):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join(timeout=2)
            assert entered.is_set()


class TestLockRegistry:
    def test_unused_locks_are_dropped(self):
        with stock_locks(["transient"]):
            assert "transient" in locks._locks

        assert "transient" not in locks._locks

    def test_held_lock_is_shared(self):
        with stock_locks(["shared"]):
            held = locks._locks["shared"]
            assert locks._lock_for("shared") is held
