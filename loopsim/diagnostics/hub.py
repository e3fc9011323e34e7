"""Trace event hub with bounded history and live subscribers."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loopsim.diagnostics.event import DiagnosticEvent
from loopsim.diagnostics.ring_buffer import RingBuffer

Subscriber = Callable[[DiagnosticEvent], None]


class DiagnosticHub:
    """Central trace event emission and snapshot facility."""

    def __init__(
        self,
        *,
        capacity: int = 10_000,
        enabled: bool = True,
        category_allowlist: tuple[str, ...] = (),
    ) -> None:
        self._enabled = bool(enabled)
        self._buffer = RingBuffer[DiagnosticEvent](capacity=capacity)
        self._subscribers: dict[int, Subscriber] = {}
        self._next_subscriber_id = 1
        self._next_seq = 1
        self._category_allowlist = tuple(
            str(item).strip().lower()
            for item in category_allowlist
            if str(item).strip()
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def capacity(self) -> int:
        return self._buffer.capacity

    @property
    def dropped_count(self) -> int:
        return self._buffer.dropped_count

    def emit(
        self,
        *,
        category: str,
        name: str,
        tick: int,
        level: str = "info",
        value: float | int | str | bool | dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> DiagnosticEvent | None:
        """Record one event unless disabled or filtered out."""
        if not self._enabled:
            return None
        normalized_category = str(category).strip().lower()
        if self._category_allowlist and normalized_category not in self._category_allowlist:
            return None
        event = DiagnosticEvent(
            seq=self._next_seq,
            tick=int(tick),
            category=normalized_category,
            name=name,
            level=level,
            value=value,
            metadata=dict(metadata or {}),
        )
        self._next_seq += 1
        self._buffer.append(event)
        for callback in tuple(self._subscribers.values()):
            callback(event)
        return event

    def subscribe(self, callback: Subscriber) -> int:
        token = self._next_subscriber_id
        self._next_subscriber_id += 1
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def clear(self) -> None:
        self._buffer.clear()

    def snapshot(
        self,
        *,
        limit: int | None = None,
        category: str | None = None,
        name: str | None = None,
    ) -> list[DiagnosticEvent]:
        events = self._buffer.snapshot(limit=limit)
        if category is not None:
            events = [event for event in events if event.category == category]
        if name is not None:
            events = [event for event in events if event.name == name]
        return events
