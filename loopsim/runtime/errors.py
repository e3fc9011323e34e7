"""Scheduler error taxonomy and exception policy helpers."""

from __future__ import annotations

from typing import TypeAlias


class LoopSimError(Exception):
    """Base class for scheduler errors."""


class InvalidArgumentError(LoopSimError, ValueError):
    """Negative delay/delta or unknown configuration value."""


class InvalidAdvanceError(LoopSimError, ValueError):
    """Clock asked to move backwards."""

    def __init__(self, requested: int, now: int) -> None:
        super().__init__(f"cannot advance clock to {requested}: now is {now}")
        self.requested = requested
        self.now = now


class QueueEmpty(LoopSimError):
    """Internal signal: nothing (due) to pop."""


class ReentrantExecutionError(LoopSimError, RuntimeError):
    """An action tried to drive its own scheduler while executing."""


# Errors raised by task actions that the frame boundary isolates.
TaskErrors: TypeAlias = tuple[type[BaseException], ...]
ISOLATED_TASK_ERRORS: TaskErrors = (Exception,)

