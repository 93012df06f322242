"""Bounded FIFO buffer for diagnostic events pushed from page listeners."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CAPACITY = 1000


class BoundedBuffer(Generic[T]):
    """Sliding window of the most recent ``capacity`` entries.

    Pushing past capacity evicts the oldest entry. ``drain`` hands back the
    current contents and empties the buffer in one step, so every entry is
    delivered at most once.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, name: str = "buffer"):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.name = name
        self._items: deque[T] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._evicted = 0

    def push(self, item: T) -> None:
        with self._lock:
            if len(self._items) == self.capacity:
                self._evicted += 1
                if self._evicted == 1 or self._evicted % self.capacity == 0:
                    logger.debug("%s full (%d), evicted %d oldest entries so far",
                                 self.name, self.capacity, self._evicted)
            self._items.append(item)

    def drain(self, predicate: Optional[Callable[[T], bool]] = None) -> list[T]:
        """Return the buffered entries and clear the buffer.

        The whole buffer is cleared even when ``predicate`` filters some
        entries out; those entries are dropped, not kept for a later drain.
        """
        with self._lock:
            items = list(self._items)
            self._items.clear()
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    def snapshot(self) -> list[T]:
        """Return a copy of the contents without clearing."""
        with self._lock:
            return list(self._items)

    @property
    def evicted(self) -> int:
        return self._evicted

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
