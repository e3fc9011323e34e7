"""Execution trace capture for scheduler runs."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loopsim.api.scheduling import Subscription
from loopsim.diagnostics.event import DiagnosticEvent
from loopsim.diagnostics.hub import DiagnosticHub
from loopsim.diagnostics.json_codec import dumps_bytes
from loopsim.runtime.events import QueueDrained, TaskEnded, TaskFailed, TaskStarted

if TYPE_CHECKING:
    from loopsim.runtime.scheduler import Scheduler


class TraceRecorder:
    """Record task lifecycle events of one scheduler into a hub."""

    def __init__(self, scheduler: Scheduler, *, hub: DiagnosticHub | None = None) -> None:
        self._scheduler = scheduler
        self._hub = hub or DiagnosticHub()
        bus = scheduler.events
        self._subscriptions: tuple[Subscription, ...] = (
            bus.subscribe(TaskStarted, self._on_started),
            bus.subscribe(TaskEnded, self._on_ended),
            bus.subscribe(TaskFailed, self._on_failed),
            bus.subscribe(QueueDrained, self._on_drained),
        )

    @property
    def hub(self) -> DiagnosticHub:
        return self._hub

    def detach(self) -> None:
        for subscription in self._subscriptions:
            self._scheduler.events.unsubscribe(subscription)
        self._subscriptions = ()

    def events(self) -> list[DiagnosticEvent]:
        return self._hub.snapshot()

    def execution_order(self) -> list[int]:
        """Return task ids in the order they started."""
        return [int(event.value) for event in self._hub.snapshot(name="task.start")]

    def started_labels(self) -> list[str | None]:
        return [event.metadata.get("label") for event in self._hub.snapshot(name="task.start")]

    def failed_task_ids(self) -> list[int]:
        return [int(event.value) for event in self._hub.snapshot(name="task.failed")]

    def export_jsonl(self, path: Path) -> Path:
        """Write the recorded trace as JSON lines and return the path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as out:
            for event in self._hub.snapshot():
                out.write(dumps_bytes(event.to_dict()))
                out.write(b"\n")
        return path

    def _on_started(self, event: TaskStarted) -> None:
        self._hub.emit(
            category="task",
            name="task.start",
            tick=event.now,
            value=event.task_id,
            metadata={"kind": event.kind.value, "label": event.label},
        )

    def _on_ended(self, event: TaskEnded) -> None:
        self._hub.emit(
            category="task",
            name="task.end",
            tick=event.now,
            value=event.task_id,
            metadata={"kind": event.kind.value},
        )

    def _on_failed(self, event: TaskFailed) -> None:
        self._hub.emit(
            category="task",
            name="task.failed",
            tick=event.now,
            level="error",
            value=event.task_id,
            metadata={
                "kind": event.kind.value,
                "error_type": type(event.error).__name__,
                "error": str(event.error),
            },
        )

    def _on_drained(self, event: QueueDrained) -> None:
        self._hub.emit(
            category="queue",
            name="queue.drained",
            tick=event.now,
            value=event.count,
            metadata={"kind": event.kind.value},
        )
