"""Scheduler activity metrics."""

from __future__ import annotations

from dataclasses import dataclass, field

from loopsim.runtime.tasks import TaskKind


@dataclass(frozen=True, slots=True)
class SchedulerMetricsSnapshot:
    """Read-only view of collected counters."""

    ticks: int
    registered_count: int
    cancelled_count: int
    failed_count: int
    longest_microtask_drain: int
    executed_by_kind: dict[str, int] = field(default_factory=dict)

    @property
    def executed_count(self) -> int:
        return sum(self.executed_by_kind.values())


class NoopSchedulerMetrics:
    """No-op collector for zero-impact disabled mode."""

    def record_tick(self) -> None:
        pass

    def record_registered(self, kind: TaskKind) -> None:
        _ = kind

    def record_cancelled(self) -> None:
        pass

    def record_executed(self, kind: TaskKind) -> None:
        _ = kind

    def record_failed(self) -> None:
        pass

    def record_microtask_drain(self, count: int) -> None:
        _ = count

    def snapshot(self) -> SchedulerMetricsSnapshot:
        return SchedulerMetricsSnapshot(
            ticks=0,
            registered_count=0,
            cancelled_count=0,
            failed_count=0,
            longest_microtask_drain=0,
        )


class SchedulerMetrics:
    """Small in-memory counter set."""

    def __init__(self) -> None:
        self._ticks = 0
        self._registered = 0
        self._cancelled = 0
        self._failed = 0
        self._longest_drain = 0
        self._executed_by_kind: dict[str, int] = {}

    def record_tick(self) -> None:
        self._ticks += 1

    def record_registered(self, kind: TaskKind) -> None:
        _ = kind
        self._registered += 1

    def record_cancelled(self) -> None:
        self._cancelled += 1

    def record_executed(self, kind: TaskKind) -> None:
        key = kind.value
        self._executed_by_kind[key] = self._executed_by_kind.get(key, 0) + 1

    def record_failed(self) -> None:
        self._failed += 1

    def record_microtask_drain(self, count: int) -> None:
        self._longest_drain = max(self._longest_drain, int(count))

    def snapshot(self) -> SchedulerMetricsSnapshot:
        return SchedulerMetricsSnapshot(
            ticks=self._ticks,
            registered_count=self._registered,
            cancelled_count=self._cancelled,
            failed_count=self._failed,
            longest_microtask_drain=self._longest_drain,
            executed_by_kind=dict(self._executed_by_kind),
        )


def create_scheduler_metrics(*, enabled: bool) -> SchedulerMetrics | NoopSchedulerMetrics:
    """Factory returning enabled collector or no-op implementation."""
    if not enabled:
        return NoopSchedulerMetrics()
    return SchedulerMetrics()
