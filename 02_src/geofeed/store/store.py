"""Bounded in-memory history of enriched events."""

from typing import Protocol

from ..models import EnrichedEvent


class IEventStore(Protocol):
    """Bounded, most-recent-first history of EnrichedEvents."""

    def append(self, event: EnrichedEvent) -> None:
        """Insert at the front, evicting the oldest entry when full."""
        ...

    def snapshot(self) -> list[EnrichedEvent]:
        """Point-in-time copy, most recent first."""
        ...


class EventStore:
    """Fixed-capacity ring buffer.

    Slots are written at ``_head``, which then advances; the newest event is
    always the slot just behind ``_head``. Once ``_size`` reaches capacity the
    next write overwrites the oldest slot.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._slots: list[EnrichedEvent | None] = [None] * capacity
        self._head = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._size

    def append(self, event: EnrichedEvent) -> None:
        """Insert at the front, evicting the oldest entry when full."""
        self._slots[self._head] = event
        self._head = (self._head + 1) % self._capacity
        if self._size < self._capacity:
            self._size += 1

    def snapshot(self) -> list[EnrichedEvent]:
        """Point-in-time copy, most recent first."""
        out = []
        for offset in range(1, self._size + 1):
            event = self._slots[(self._head - offset) % self._capacity]
            out.append(event)
        return out

    def latest(self) -> EnrichedEvent | None:
        """Most recently appended event."""
        if not self._size:
            return None
        return self._slots[(self._head - 1) % self._capacity]

    def clear(self) -> None:
        """Drop all events."""
        self._slots = [None] * self._capacity
        self._head = 0
        self._size = 0
