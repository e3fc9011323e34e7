"""Deterministic event loop simulation: macrotasks, microtasks and Node-style phases."""

from loopsim.api.scheduling import create_scheduler
from loopsim.runtime import (
    InvalidAdvanceError,
    InvalidArgumentError,
    LogicalClock,
    LoopSimError,
    Promise,
    Scheduler,
    SchedulerConfig,
    SchedulerState,
    TaskKind,
    load_scheduler_config,
)

__all__ = [
    "InvalidAdvanceError",
    "InvalidArgumentError",
    "LogicalClock",
    "LoopSimError",
    "Promise",
    "Scheduler",
    "SchedulerConfig",
    "SchedulerState",
    "TaskKind",
    "create_scheduler",
    "load_scheduler_config",
]
