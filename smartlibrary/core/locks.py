#!/usr/bin/env python

"""
    Per-item mutual exclusion for stores that cannot lock rows.

    SQLite ignores ``SELECT ... FOR UPDATE``, so the read-modify-write
    sequence of a borrow or return is guarded by one lock per item id
    instead. Transactions on different items never share a lock.

    An item's entry only lives while some caller holds or waits for its
    lock, so the registry never outgrows the number of transactions in
    flight.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
import threading

logger = logging.getLogger(__name__)


class HeldLock:
    """The lock on one item, as handed out by `ItemLocks.acquire`."""

    def __init__(self, registry, item_id, lock):
        self.registry = registry
        self.item_id = item_id
        self._lock = lock

    def release(self):
        self._lock.release()
        self.registry._checkin(self.item_id)


class ItemLocks:

    def __init__(self):
        self._guard = threading.Lock()
        # item_id -> [lock, number of holders and waiters]
        self._locks = {}

    def _checkout(self, item_id) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(item_id)
            if entry is None:
                entry = self._locks[item_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, item_id):
        with self._guard:
            entry = self._locks[item_id]
            entry[1] -= 1
            if not entry[1]:
                del self._locks[item_id]

    def acquire(self, item_id, timeout: float) -> HeldLock:
        """Blocks until the lock for `item_id` is held and returns it,
        or returns None if `timeout` seconds elapse first.
        """
        lock = self._checkout(item_id)
        if lock.acquire(timeout=timeout):
            return HeldLock(self, item_id, lock)
        self._checkin(item_id)
        logger.warning(f"Timed out after {timeout}s waiting for item {item_id}")
        return None

    def __contains__(self, item_id):
        with self._guard:
            return item_id in self._locks

    def __len__(self):
        with self._guard:
            return len(self._locks)
