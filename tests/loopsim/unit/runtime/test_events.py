from __future__ import annotations

from loopsim.runtime.events import (
    QueueDrained,
    SchedulerEvent,
    SchedulerEventBus,
    TaskFailed,
    TaskStarted,
    attach_observer,
)
from loopsim.runtime.tasks import TaskKind


def test_event_bus_publish_invokes_subscribers() -> None:
    bus = SchedulerEventBus()
    seen: list[int] = []
    bus.subscribe(TaskStarted, lambda event: seen.append(event.task_id))

    invoked = bus.publish(TaskStarted(task_id=7, kind=TaskKind.TIMER, now=0))

    assert invoked == 1
    assert seen == [7]


def test_event_bus_supports_polymorphic_subscription() -> None:
    bus = SchedulerEventBus()
    seen: list[str] = []
    bus.subscribe(SchedulerEvent, lambda event: seen.append(type(event).__name__))

    bus.publish(TaskStarted(task_id=1, kind=TaskKind.MICROTASK, now=0))
    bus.publish(QueueDrained(kind=TaskKind.MICROTASK, count=1))

    assert seen == ["TaskStarted", "QueueDrained"]


def test_event_bus_unsubscribe_stops_dispatch() -> None:
    bus = SchedulerEventBus()
    seen: list[int] = []
    subscription = bus.subscribe(TaskStarted, lambda event: seen.append(event.task_id))
    bus.unsubscribe(subscription)

    invoked = bus.publish(TaskStarted(task_id=1, kind=TaskKind.TIMER, now=0))

    assert invoked == 0
    assert seen == []
    assert bus.subscriber_count == 0


def test_attach_observer_only_wires_provided_hooks() -> None:
    class StartOnly:
        def __init__(self) -> None:
            self.started: list[tuple[int, TaskKind]] = []

        def on_task_start(self, task_id: int, kind: TaskKind) -> None:
            self.started.append((task_id, kind))

    bus = SchedulerEventBus()
    observer = StartOnly()

    subscriptions = attach_observer(bus, observer)  # type: ignore[arg-type]
    bus.publish(TaskStarted(task_id=3, kind=TaskKind.IMMEDIATE, now=0))
    bus.publish(TaskFailed(task_id=3, kind=TaskKind.IMMEDIATE, error=ValueError("x")))

    assert len(subscriptions) == 1
    assert observer.started == [(3, TaskKind.IMMEDIATE)]
