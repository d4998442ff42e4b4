"""Fixed-capacity FIFO used for pressure history and dashboard logs."""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterable, Iterator, Optional, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 20


class RingBuffer(Generic[T]):
    """Bounded FIFO with O(1) append and eviction.

    Once ``capacity`` items are held, each ``push`` drops the oldest item.
    Surviving items keep their insertion order. Snapshots store the frozen
    ``tuple`` form; the buffer is only a working copy while a transition is
    being assembled.
    """

    def __init__(self, items: Iterable[T] = (), capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)
        for item in items:
            self.push(item)

    def push(self, item: T) -> Optional[T]:
        """Append ``item`` and return the evicted item, if any."""
        evicted = self._items[0] if len(self._items) == self.capacity else None
        self._items.append(item)
        return evicted

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.push(item)

    def to_tuple(self) -> Tuple[T, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"RingBuffer({list(self._items)!r}, capacity={self.capacity})"


def push_bounded(
    items: Iterable[T], *new_items: T, capacity: int = DEFAULT_CAPACITY
) -> Tuple[T, ...]:
    """Return a new tuple holding ``items`` plus ``new_items``, oldest dropped first."""
    buffer: RingBuffer[T] = RingBuffer(items, capacity=capacity)
    buffer.extend(new_items)
    return buffer.to_tuple()
