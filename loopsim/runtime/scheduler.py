"""Deterministic macrotask/microtask scheduler loop and registrar."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from loopsim.api.scheduling import Action, SchedulerObserver, Subscription
from loopsim.runtime.clock import LogicalClock, require_ms
from loopsim.runtime.config import SchedulerConfig
from loopsim.runtime.errors import (
    ISOLATED_TASK_ERRORS,
    InvalidArgumentError,
    QueueEmpty,
    ReentrantExecutionError,
)
from loopsim.runtime.events import (
    QueueDrained,
    SchedulerEventBus,
    TaskEnded,
    TaskFailed,
    TaskStarted,
    attach_observer,
)
from loopsim.runtime.metrics import NoopSchedulerMetrics, SchedulerMetrics
from loopsim.runtime.queues import QueueSet
from loopsim.runtime.tasks import Task, TaskKind

_LOG = logging.getLogger("loopsim.scheduler")


class SchedulerState(str, Enum):
    IDLE = "idle"
    DRAINING_STACK = "draining_stack"
    DRAINING_MICROTASKS = "draining_microtasks"
    SELECTING_MACROTASK = "selecting_macrotask"
    STOPPED = "stopped"


class Scheduler:
    """Single-threaded event loop model with browser and Node-style phases.

    Exactly one action runs at a time and always runs to completion. Each
    instance owns its clock, queues and id counter, so independent instances
    can be driven from separate threads without coordination.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        *,
        clock: LogicalClock | None = None,
        metrics: SchedulerMetrics | NoopSchedulerMetrics | None = None,
    ) -> None:
        self._config = config or SchedulerConfig()
        self._clock = clock or LogicalClock()
        self._queues = QueueSet()
        self._events = SchedulerEventBus()
        self._metrics = metrics or NoopSchedulerMetrics()
        self._next_task_id = 1
        self._state = SchedulerState.IDLE
        self._running = False
        self._stop_requested = False
        self._current: Task | None = None
        self._executed_count = 0
        self._enqueued_since_consume = 0
        self._dequeued_since_consume = 0

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def clock(self) -> LogicalClock:
        return self._clock

    @property
    def queues(self) -> QueueSet:
        return self._queues

    @property
    def events(self) -> SchedulerEventBus:
        return self._events

    @property
    def metrics(self) -> SchedulerMetrics | NoopSchedulerMetrics:
        return self._metrics

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    @property
    def now(self) -> int:
        return self._clock.now()

    @property
    def current_task_id(self) -> int | None:
        """Return the id of the executing task, if any."""
        return None if self._current is None else self._current.task_id

    @property
    def executed_count(self) -> int:
        return self._executed_count

    @property
    def pending_count(self) -> int:
        return self._queues.total_count

    def add_observer(self, observer: SchedulerObserver) -> tuple[Subscription, ...]:
        """Attach observer hooks and return their subscriptions."""
        return attach_observer(self._events, observer)

    def remove_observer(self, subscriptions: tuple[Subscription, ...]) -> None:
        for subscription in subscriptions:
            self._events.unsubscribe(subscription)

    def consume_activity_counts(self) -> tuple[int, int]:
        """Return and reset enqueued/dequeued counts since last consume."""
        counts = (self._enqueued_since_consume, self._dequeued_since_consume)
        self._enqueued_since_consume = 0
        self._dequeued_since_consume = 0
        return counts

    # Registrar

    def schedule_timer(self, action: Action, delay_ms: int = 0, *, label: str | None = None) -> int:
        """Register a timer firing no earlier than `delay_ms` from now."""
        effective_delay = max(require_ms("delay_ms", delay_ms), self._config.min_timer_delay_ms)
        task = self._new_task(
            TaskKind.TIMER,
            action,
            ready_at=self.now + effective_delay,
            label=label,
        )
        self._queues.push_macrotask(task, task.ready_at)
        return task.task_id

    def schedule_microtask(self, action: Action, *, label: str | None = None) -> int:
        task = self._new_task(TaskKind.MICROTASK, action, ready_at=self.now, label=label)
        self._queues.push_microtask(task)
        return task.task_id

    def schedule_immediate(self, action: Action, *, label: str | None = None) -> int:
        """Register a check-phase task (``setImmediate`` analogue)."""
        task = self._new_task(TaskKind.IMMEDIATE, action, ready_at=self.now, label=label)
        self._queues.push_immediate(task)
        return task.task_id

    def schedule_macrotask(self, action: Action, *, label: str | None = None) -> int:
        """Register a generic task that is due immediately."""
        task = self._new_task(TaskKind.MACROTASK, action, ready_at=self.now, label=label)
        if self._config.uses_node_phases:
            self._queues.push_poll(task)
        else:
            self._queues.push_macrotask(task, task.ready_at)
        return task.task_id

    def inject_io(self, action: Action, *, label: str | None = "io") -> int:
        """Inject an I/O completion processed by the poll phase."""
        return self.schedule_macrotask(action, label=label)

    def schedule_close(self, action: Action, *, label: str | None = None) -> int:
        """Register a close callback (last phase of a Node-style iteration)."""
        task = self._new_task(TaskKind.CLOSE, action, ready_at=self.now, label=label)
        if self._config.uses_node_phases:
            self._queues.push_close(task)
        else:
            self._queues.push_macrotask(task, task.ready_at)
        return task.task_id

    def push_script(self, action: Action, *, label: str | None = None) -> int:
        """Push a synchronous frame onto the call stack."""
        task = self._new_task(TaskKind.SCRIPT, action, ready_at=self.now, label=label)
        self._queues.push_frame(task)
        return task.task_id

    def cancel(self, task_id: int) -> bool:
        """Remove a not-yet-started task. Unknown or started ids return False."""
        removed = self._queues.remove(task_id)
        if removed is None:
            return False
        self._metrics.record_cancelled()
        _LOG.debug("task_cancelled id=%d kind=%s", removed.task_id, removed.kind.value)
        return True

    # Loop

    def tick(self) -> bool:
        """Run one pass of the loop algorithm and return whether work ran."""
        self._ensure_not_executing()
        if self._state is SchedulerState.STOPPED and self._queues.is_empty():
            return False
        self._metrics.record_tick()
        if self._queues.stack_depth:
            self._set_state(SchedulerState.DRAINING_STACK)
            self._execute(self._queues.pop_frame())
            return True
        if self._queues.microtask_count:
            self._set_state(SchedulerState.DRAINING_MICROTASKS)
            self._drain_microtasks()
            return True
        self._set_state(SchedulerState.SELECTING_MACROTASK)
        if self._config.uses_node_phases:
            ran = self._run_phases()
        else:
            ran = self._run_one_macrotask()
        if ran:
            return True
        self._settle()
        return False

    def run(self, *, max_ticks: int | None = None) -> int:
        """Run until finished (finite mode) or idle (persistent mode).

        In finite mode the clock skips ahead to the next pending timer when
        nothing else is runnable. Returns the number of tasks executed.
        """
        return self._drive(advance_clock=not self._config.persistent, max_ticks=max_ticks)

    def run_until_idle(self, *, max_ticks: int | None = None) -> int:
        """Run everything runnable at the current time without moving the clock."""
        return self._drive(advance_clock=False, max_ticks=max_ticks)

    def advance_to(self, t: int) -> int:
        """Move the clock to `t` and run everything that became runnable."""
        self._ensure_not_executing()
        self._clock.advance_to(t)
        return self.run_until_idle()

    def advance_by(self, delta: int) -> int:
        self._ensure_not_executing()
        self._clock.advance_by(delta)
        return self.run_until_idle()

    def stop(self) -> None:
        """Clear every queue and stop the loop."""
        dropped = self._queues.total_count
        self._queues.clear()
        self._stop_requested = self._running
        self._set_state(SchedulerState.STOPPED)
        _LOG.debug("scheduler_stopped dropped=%d", dropped)

    def _drive(self, *, advance_clock: bool, max_ticks: int | None) -> int:
        self._ensure_not_executing()
        if max_ticks is not None and max_ticks <= 0:
            raise InvalidArgumentError("max_ticks must be > 0")
        executed_before = self._executed_count
        self._running = True
        self._stop_requested = False
        ticks = 0
        try:
            while max_ticks is None or ticks < max_ticks:
                if self._stop_requested:
                    break
                ticks += 1
                if self.tick():
                    continue
                next_at = self._queues.next_timer_at()
                if not advance_clock or next_at is None:
                    break
                _LOG.debug("clock_skip from=%d to=%d", self.now, next_at)
                self._clock.advance_to(next_at)
        finally:
            self._running = False
        return self._executed_count - executed_before

    def _run_one_macrotask(self) -> bool:
        now = self.now
        timer = self._queues.peek_due_macrotask(now)
        immediate = self._queues.peek_next_immediate()
        if timer is None and immediate is None:
            return False
        if immediate is not None and (timer is None or immediate.sort_key < timer.sort_key):
            self._execute(self._queues.pop_next_immediate())
        else:
            self._execute(self._queues.pop_due_macrotask(now))
        return True

    def _run_phases(self) -> bool:
        ran = self._run_timers_phase()
        ran += self._run_fifo_phase(
            TaskKind.MACROTASK, self._queues.peek_next_poll, self._queues.pop_next_poll
        )
        ran += self._run_fifo_phase(
            TaskKind.IMMEDIATE, self._queues.peek_next_immediate, self._queues.pop_next_immediate
        )
        ran += self._run_fifo_phase(
            TaskKind.CLOSE, self._queues.peek_next_close, self._queues.pop_next_close
        )
        return ran > 0

    def _run_timers_phase(self) -> int:
        # Timers registered during this phase wait for the next iteration.
        watermark = self._next_task_id
        phase_now = self.now
        ran = 0
        while True:
            head = self._queues.peek_due_macrotask(phase_now)
            if head is None or head.task_id >= watermark:
                break
            self._execute(self._queues.pop_due_macrotask(phase_now))
            self._drain_after_callback()
            ran += 1
        if ran:
            self._events.publish(QueueDrained(kind=TaskKind.TIMER, count=ran, now=self.now))
        return ran

    def _run_fifo_phase(
        self,
        kind: TaskKind,
        peek: Callable[[], Task | None],
        pop: Callable[[], Task],
    ) -> int:
        # Only entries registered before the phase starts run in this pass.
        watermark = self._next_task_id
        ran = 0
        while True:
            head = peek()
            if head is None or head.task_id >= watermark:
                break
            self._execute(pop())
            self._drain_after_callback()
            ran += 1
        if ran:
            self._events.publish(QueueDrained(kind=kind, count=ran, now=self.now))
        return ran

    def _drain_after_callback(self) -> None:
        while self._queues.stack_depth or self._queues.microtask_count:
            if self._queues.stack_depth:
                self._execute(self._queues.pop_frame())
                continue
            self._drain_microtasks()

    def _drain_microtasks(self) -> int:
        """Run microtasks until the queue is observably empty."""
        drained = 0
        while True:
            try:
                task = self._queues.pop_next_microtask()
            except QueueEmpty:
                break
            self._execute(task)
            drained += 1
        if drained:
            self._metrics.record_microtask_drain(drained)
            self._events.publish(QueueDrained(kind=TaskKind.MICROTASK, count=drained, now=self.now))
        return drained

    def _execute(self, task: Task) -> None:
        self._dequeued_since_consume += 1
        self._events.publish(TaskStarted(task_id=task.task_id, kind=task.kind, now=self.now, label=task.label))
        self._current = task
        failure: Exception | None = None
        try:
            task.action()
        except ISOLATED_TASK_ERRORS as exc:
            failure = exc
        finally:
            self._current = None
            self._executed_count += 1
            self._metrics.record_executed(task.kind)
        if failure is None:
            self._events.publish(TaskEnded(task_id=task.task_id, kind=task.kind, now=self.now))
            return
        self._metrics.record_failed()
        _LOG.warning(
            "task_failed id=%d kind=%s label=%s",
            task.task_id,
            task.kind.value,
            task.label,
            exc_info=failure,
        )
        self._events.publish(
            TaskFailed(task_id=task.task_id, kind=task.kind, error=failure, now=self.now)
        )

    def _settle(self) -> None:
        if not self._queues.is_empty():
            self._set_state(SchedulerState.IDLE)
            return
        if self._config.persistent:
            self._set_state(SchedulerState.IDLE)
        else:
            self._set_state(SchedulerState.STOPPED)

    def _new_task(
        self,
        kind: TaskKind,
        action: Action,
        *,
        ready_at: int,
        label: str | None,
    ) -> Task:
        if not callable(action):
            raise InvalidArgumentError("action must be callable")
        task_id = self._next_task_id
        self._next_task_id += 1
        self._enqueued_since_consume += 1
        self._metrics.record_registered(kind)
        if self._state is SchedulerState.STOPPED:
            self._set_state(SchedulerState.IDLE)
        return Task(
            task_id=task_id,
            kind=kind,
            ready_at=ready_at,
            enqueued_at=self.now,
            action=action,
            label=label,
        )

    def _set_state(self, state: SchedulerState) -> None:
        if state is self._state:
            return
        if _LOG.isEnabledFor(logging.DEBUG):
            _LOG.debug("scheduler_state from=%s to=%s now=%d", self._state.value, state.value, self.now)
        self._state = state

    def _ensure_not_executing(self) -> None:
        if self._current is not None:
            raise ReentrantExecutionError(
                f"task {self._current.task_id} tried to drive its own scheduler"
            )
