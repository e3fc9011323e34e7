from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from loopsim.runtime.config import SchedulerConfig
from loopsim.runtime.scheduler import Scheduler
from loopsim.runtime.tasks import TaskKind


@dataclass
class RecordingObserver:
    started: list[tuple[int, TaskKind]] = field(default_factory=list)
    ended: list[int] = field(default_factory=list)
    failed: list[tuple[int, BaseException]] = field(default_factory=list)
    drained: list[TaskKind] = field(default_factory=list)

    def on_task_start(self, task_id: int, kind: TaskKind) -> None:
        self.started.append((task_id, kind))

    def on_task_end(self, task_id: int) -> None:
        self.ended.append(task_id)

    def on_task_failed(self, task_id: int, error: BaseException) -> None:
        self.failed.append((task_id, error))

    def on_queue_drained(self, kind: TaskKind) -> None:
        self.drained.append(kind)


@pytest.fixture
def browser() -> Scheduler:
    return Scheduler(SchedulerConfig.browser())


@pytest.fixture
def server() -> Scheduler:
    return Scheduler(SchedulerConfig.server())


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()
