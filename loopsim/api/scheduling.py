"""Public scheduling API contracts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from loopsim.runtime.config import SchedulerConfig
    from loopsim.runtime.scheduler import Scheduler
    from loopsim.runtime.tasks import TaskKind

Action = Callable[[], object]


@dataclass(frozen=True, slots=True)
class Subscription:
    """Opaque subscription token."""

    id: int


class Registrar(Protocol):
    """Registration surface that script code uses to enqueue work."""

    def schedule_timer(self, action: Action, delay_ms: int = 0) -> int:
        """Register a timer task and return its id."""

    def schedule_microtask(self, action: Action) -> int:
        """Register a microtask and return its id."""

    def schedule_immediate(self, action: Action) -> int:
        """Register a check-phase task and return its id."""

    def cancel(self, task_id: int) -> bool:
        """Cancel a task that has not started yet."""


class SchedulerObserver(Protocol):
    """Hooks used by harnesses and debugging UIs to record execution."""

    def on_task_start(self, task_id: int, kind: "TaskKind") -> None: ...

    def on_task_end(self, task_id: int) -> None: ...

    def on_task_failed(self, task_id: int, error: BaseException) -> None: ...

    def on_queue_drained(self, kind: "TaskKind") -> None: ...


def create_scheduler(config: "SchedulerConfig | None" = None) -> "Scheduler":
    """Create default scheduler implementation."""
    from loopsim.runtime.scheduler import Scheduler

    return Scheduler(config)
