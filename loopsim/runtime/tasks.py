"""Task data model shared by queues and the scheduler loop."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

TaskAction = Callable[[], object]


class TaskKind(str, Enum):
    SCRIPT = "script"
    MACROTASK = "macrotask"
    MICROTASK = "microtask"
    TIMER = "timer"
    IMMEDIATE = "immediate"
    CLOSE = "close"


@dataclass(frozen=True, slots=True)
class Task:
    """Unit of deferred work. Immutable; only its queue position changes."""

    task_id: int
    kind: TaskKind
    ready_at: int
    enqueued_at: int
    action: TaskAction
    label: str | None = None

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.ready_at, self.enqueued_at, self.task_id)
