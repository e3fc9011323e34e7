"""Public loopsim API contracts."""

from loopsim.api.scheduling import (
    Action,
    Registrar,
    SchedulerObserver,
    Subscription,
    create_scheduler,
)
from loopsim.api.logging import LoggingConfig

__all__ = [
    "Action",
    "LoggingConfig",
    "Registrar",
    "SchedulerObserver",
    "Subscription",
    "create_scheduler",
]
