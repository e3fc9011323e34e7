"""Fixed-capacity ring buffer for trace events."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Drop-oldest ring buffer with O(1) append and a dropped-item counter."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._capacity = int(capacity)
        self._slots: list[T | None] = [None] * self._capacity
        self._head = 0
        self._size = 0
        self._dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def dropped_count(self) -> int:
        return self._dropped

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())

    def append(self, value: T) -> None:
        if self._size == self._capacity:
            self._dropped += 1
        self._slots[self._head] = value
        self._head = (self._head + 1) % self._capacity
        self._size = min(self._size + 1, self._capacity)

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self._head = 0
        self._size = 0

    def snapshot(self, *, limit: int | None = None) -> list[T]:
        """Return items oldest first, optionally only the newest `limit`."""
        start = (self._head - self._size) % self._capacity
        items = [self._slots[(start + offset) % self._capacity] for offset in range(self._size)]
        out = [item for item in items if item is not None]
        if limit is None or limit >= len(out):
            return out
        return out[len(out) - max(0, int(limit)) :]
