from __future__ import annotations

import loopsim
from loopsim.api import create_scheduler
from loopsim.runtime.config import SchedulerConfig
from loopsim.runtime.scheduler import Scheduler


def test_create_scheduler_returns_runtime_scheduler() -> None:
    scheduler = create_scheduler(SchedulerConfig.server())
    assert isinstance(scheduler, Scheduler)
    assert scheduler.config.environment == "server"


def test_create_scheduler_defaults_to_browser() -> None:
    assert create_scheduler().config == SchedulerConfig()


def test_package_exports_public_surface() -> None:
    scheduler = loopsim.create_scheduler()
    log: list[str] = []
    loopsim.Promise.resolved(scheduler, "x").then(log.append)
    scheduler.run()

    assert log == ["x"]
    assert scheduler.state is loopsim.SchedulerState.STOPPED
