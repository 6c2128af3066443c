"""Per-product stock locks.

Checkouts that touch the same product must not interleave their stock
re-check and decrement. Locks are taken in sorted product-id order so two
checkouts with overlapping carts cannot deadlock, and checkouts with disjoint
carts never wait on each other.

The registry holds locks weakly: a product's lock lives only while some
checkout holds or waits on it, so the registry does not grow with the catalogue.
"""

import threading
import weakref
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

_registry_lock = threading.Lock()
_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(product_id: str) -> threading.Lock:
    with _registry_lock:
        lock = _locks.get(product_id)
        if lock is None:
            lock = _locks[product_id] = threading.Lock()
        return lock


@contextmanager
def stock_locks(product_ids: Iterable) -> Iterator[None]:
    """Hold the stock lock of every product in ``product_ids`` for the block."""
    ordered = sorted({str(pid) for pid in product_ids})
    acquired: list[threading.Lock] = []
    try:
        for product_id in ordered:
            lock = _lock_for(product_id)
            lock.acquire()
            acquired.append(lock)
        yield
    finally:
        for lock in reversed(acquired):
            lock.release()
