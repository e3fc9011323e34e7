"""Structured diagnostics event schema."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TRACE_EVENT_SCHEMA_VERSION = "loopsim.trace_event.v1"


@dataclass(frozen=True, slots=True)
class DiagnosticEvent:
    """Single structured diagnostics event.

    `tick` is the scheduler's logical time and `seq` the emission order,
    so a trace is reproducible across runs.
    """

    seq: int
    tick: int
    category: str
    name: str
    level: str = "info"
    value: float | int | str | bool | dict[str, Any] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": TRACE_EVENT_SCHEMA_VERSION,
            "seq": int(self.seq),
            "tick": int(self.tick),
            "category": self.category,
            "name": self.name,
            "level": self.level,
            "value": self.value,
            "metadata": dict(self.metadata),
        }
