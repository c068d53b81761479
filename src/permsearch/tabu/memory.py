from __future__ import annotations

from collections import Counter, deque
from typing import Deque, Hashable, Iterator


class TabuQueue:
    """Bounded FIFO of recently visited solutions with O(1) membership tests.

    The oldest entries are evicted first, both when a push exceeds the
    capacity and when the capacity shrinks. Invariant: ``len(q) <= q.capacity``.
    """

    def __init__(self, capacity: int) -> None:
        self._items: Deque[Hashable] = deque()
        self._counts: Counter = Counter()
        self._capacity = 1
        self.resize(capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def resize(self, capacity: int) -> None:
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"Tabu queue capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._trim()

    def push(self, item: Hashable) -> None:
        self._items.append(item)
        self._counts[item] += 1
        self._trim()

    def _trim(self) -> None:
        while len(self._items) > self._capacity:
            old = self._items.popleft()
            self._counts[old] -= 1
            if self._counts[old] <= 0:
                del self._counts[old]

    def __contains__(self, item: Hashable) -> bool:
        return item in self._counts

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"TabuQueue(len={len(self._items)}, capacity={self._capacity})"


__all__ = ["TabuQueue"]
