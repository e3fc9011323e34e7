"""Construction-time scheduler configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Mapping

from loopsim.runtime.clock import require_ms
from loopsim.runtime.errors import InvalidArgumentError

Environment = Literal["browser", "server"]
PhaseModel = Literal["simple", "node-phases"]

ENVIRONMENTS: tuple[str, ...] = ("browser", "server")
PHASE_MODELS: tuple[str, ...] = ("simple", "node-phases")
BROWSER_MIN_TIMER_DELAY_MS = 4
SERVER_MIN_TIMER_DELAY_MS = 0


@dataclass(frozen=True, slots=True)
class SchedulerConfig:
    """Immutable scheduler mode configuration."""

    environment: Environment = "browser"
    min_timer_delay_ms: int | None = None
    phase_model: PhaseModel | None = None
    persistent: bool = False

    def __post_init__(self) -> None:
        # Unset fields take the environment's defaults.
        env_name = str(self.environment).strip().lower()
        if env_name not in ENVIRONMENTS:
            raise InvalidArgumentError(f"unknown environment: {self.environment!r}")
        delay = self.min_timer_delay_ms
        if delay is None:
            delay = BROWSER_MIN_TIMER_DELAY_MS if env_name == "browser" else SERVER_MIN_TIMER_DELAY_MS
        model = self.phase_model
        if model is None:
            model = "simple" if env_name == "browser" else "node-phases"
        normalized = _normalize_phase_model(model)
        if normalized not in PHASE_MODELS:
            raise InvalidArgumentError(f"unknown phase model: {model!r}")
        object.__setattr__(self, "environment", env_name)
        object.__setattr__(self, "min_timer_delay_ms", require_ms("min_timer_delay_ms", delay))
        object.__setattr__(self, "phase_model", normalized)
        object.__setattr__(self, "persistent", bool(self.persistent))

    @classmethod
    def create(
        cls,
        *,
        environment: str = "browser",
        min_timer_delay_ms: int | None = None,
        phase_model: str | None = None,
        persistent: bool = False,
    ) -> SchedulerConfig:
        """Validate and resolve environment-dependent defaults."""
        return cls(
            environment=environment,  # type: ignore[arg-type]
            min_timer_delay_ms=min_timer_delay_ms,
            phase_model=phase_model,  # type: ignore[arg-type]
            persistent=persistent,
        )

    @classmethod
    def browser(cls, **overrides: object) -> SchedulerConfig:
        return cls.create(environment="browser", **overrides)  # type: ignore[arg-type]

    @classmethod
    def server(cls, **overrides: object) -> SchedulerConfig:
        return cls.create(environment="server", **overrides)  # type: ignore[arg-type]

    @property
    def uses_node_phases(self) -> bool:
        return self.phase_model == "node-phases"


def _normalize_phase_model(raw: str) -> str:
    value = str(raw).strip().lower().replace("_", "-")
    if value in {"node", "phases", "node-phases"}:
        return "node-phases"
    return value


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _flag(name: str, default: bool, *, env: Mapping[str, str] | None = None) -> bool:
    raw = _raw(name, env=env)
    if raw is None:
        return bool(default)
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return bool(default)


def _int(name: str, *, env: Mapping[str, str] | None = None) -> int | None:
    raw = _raw(name, env=env)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise InvalidArgumentError(f"{name} must be an integer, got {raw!r}") from exc


def _text(name: str, default: str | None, *, env: Mapping[str, str] | None = None) -> str | None:
    raw = _raw(name, env=env)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


def load_scheduler_config(*, env: Mapping[str, str] | None = None) -> SchedulerConfig:
    """Load and validate scheduler configuration from `LOOPSIM_*` variables."""
    return SchedulerConfig.create(
        environment=_text("LOOPSIM_ENVIRONMENT", "browser", env=env) or "browser",
        min_timer_delay_ms=_int("LOOPSIM_MIN_TIMER_DELAY_MS", env=env),
        phase_model=_text("LOOPSIM_PHASE_MODEL", None, env=env),
        persistent=_flag("LOOPSIM_PERSISTENT", False, env=env),
    )
