"""Observer events and the per-scheduler event bus."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loopsim.api.scheduling import SchedulerObserver, Subscription
from loopsim.runtime.tasks import TaskKind

TEvent = TypeVar("TEvent")
EventHandler = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class SchedulerEvent:
    """Base type for everything the scheduler publishes."""


@dataclass(frozen=True, slots=True)
class TaskStarted(SchedulerEvent):
    task_id: int
    kind: TaskKind
    now: int
    label: str | None = None


@dataclass(frozen=True, slots=True)
class TaskEnded(SchedulerEvent):
    task_id: int
    kind: TaskKind
    now: int


@dataclass(frozen=True, slots=True)
class TaskFailed(SchedulerEvent):
    task_id: int
    kind: TaskKind
    error: BaseException
    now: int = 0


@dataclass(frozen=True, slots=True)
class QueueDrained(SchedulerEvent):
    kind: TaskKind
    count: int
    now: int = 0


class SchedulerEventBus:
    """Simple in-process pub/sub dispatching by event type."""

    def __init__(self) -> None:
        self._next_id = 1
        self._subscriptions: dict[int, tuple[type[object], EventHandler]] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        event_type: type[TEvent],
        handler: Callable[[TEvent], None],
    ) -> Subscription:
        """Subscribe handler for an event type."""
        sub_id = self._next_id
        self._next_id += 1
        self._subscriptions[sub_id] = (event_type, handler)
        return Subscription(sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription if present."""
        self._subscriptions.pop(subscription.id, None)

    def publish(self, event: object) -> int:
        """Publish one event and return number of invoked handlers."""
        invoked = 0
        for subscribed_type, handler in tuple(self._subscriptions.values()):
            if isinstance(event, subscribed_type):
                handler(event)
                invoked += 1
        return invoked


def attach_observer(bus: SchedulerEventBus, observer: SchedulerObserver) -> tuple[Subscription, ...]:
    """Route bus events to the hook methods the observer provides."""
    subscriptions: list[Subscription] = []
    on_start = getattr(observer, "on_task_start", None)
    if callable(on_start):
        subscriptions.append(
            bus.subscribe(TaskStarted, lambda event: on_start(event.task_id, event.kind))
        )
    on_end = getattr(observer, "on_task_end", None)
    if callable(on_end):
        subscriptions.append(bus.subscribe(TaskEnded, lambda event: on_end(event.task_id)))
    on_failed = getattr(observer, "on_task_failed", None)
    if callable(on_failed):
        subscriptions.append(
            bus.subscribe(TaskFailed, lambda event: on_failed(event.task_id, event.error))
        )
    on_drained = getattr(observer, "on_queue_drained", None)
    if callable(on_drained):
        subscriptions.append(bus.subscribe(QueueDrained, lambda event: on_drained(event.kind)))
    return tuple(subscriptions)
