# slots.py
from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1


class ConcurrencySlot:
    """
    Fixed-capacity gate for parallel tasks.

    The control thread acquires one slot per parallel dispatch (blocking
    while all are taken); the background unit releases it when its last
    command returns. Capacity 1 serializes parallel tasks against each
    other but not against the rest of the pass.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Concurrency capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._sem = threading.BoundedSemaphore(capacity)

    def acquire(self, owner: str = "") -> None:
        logger.debug("waiting for slot (capacity=%d) for %r", self.capacity, owner)
        self._sem.acquire()
        logger.debug("slot acquired for %r", owner)

    def release(self, owner: str = "") -> None:
        self._sem.release()
        logger.debug("slot released by %r", owner)
