"""Scheduler runtime modules."""

from loopsim.runtime.clock import LogicalClock
from loopsim.runtime.config import SchedulerConfig, load_scheduler_config
from loopsim.runtime.errors import (
    InvalidAdvanceError,
    InvalidArgumentError,
    LoopSimError,
    QueueEmpty,
    ReentrantExecutionError,
)
from loopsim.runtime.events import (
    QueueDrained,
    SchedulerEvent,
    SchedulerEventBus,
    TaskEnded,
    TaskFailed,
    TaskStarted,
)
from loopsim.runtime.logging import configure_logging, setup_logging
from loopsim.runtime.metrics import (
    NoopSchedulerMetrics,
    SchedulerMetrics,
    SchedulerMetricsSnapshot,
    create_scheduler_metrics,
)
from loopsim.runtime.promises import Promise, PromiseState
from loopsim.runtime.queues import QueueSet
from loopsim.runtime.scheduler import Scheduler, SchedulerState
from loopsim.runtime.tasks import Task, TaskKind

__all__ = [
    "InvalidAdvanceError",
    "InvalidArgumentError",
    "LogicalClock",
    "LoopSimError",
    "NoopSchedulerMetrics",
    "Promise",
    "PromiseState",
    "QueueDrained",
    "QueueEmpty",
    "QueueSet",
    "ReentrantExecutionError",
    "Scheduler",
    "SchedulerConfig",
    "SchedulerEvent",
    "SchedulerEventBus",
    "SchedulerMetrics",
    "SchedulerMetricsSnapshot",
    "SchedulerState",
    "Task",
    "TaskEnded",
    "TaskFailed",
    "TaskKind",
    "TaskStarted",
    "configure_logging",
    "create_scheduler_metrics",
    "load_scheduler_config",
    "setup_logging",
]
