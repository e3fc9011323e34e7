"""Logical time source for deterministic scheduling."""

from __future__ import annotations

from loopsim.runtime.errors import InvalidAdvanceError, InvalidArgumentError


def require_ms(name: str, value: object) -> int:
    """Return `value` as a non-negative millisecond count or raise."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer millisecond count, got {value!r}")
    if value < 0:
        raise InvalidArgumentError(f"{name} must be >= 0")
    return int(value)


class LogicalClock:
    """Monotonic integer clock measured in simulated milliseconds."""

    def __init__(self, *, start: int = 0) -> None:
        self._now = require_ms("start", start)

    def now(self) -> int:
        return self._now

    def advance_to(self, t: int) -> int:
        """Move time forward to `t` and return the new time."""
        if isinstance(t, bool) or not isinstance(t, int):
            raise InvalidArgumentError(f"t must be an integer millisecond count, got {t!r}")
        if t < self._now:
            raise InvalidAdvanceError(t, self._now)
        self._now = int(t)
        return self._now

    def advance_by(self, delta: int) -> int:
        """Move time forward by `delta` and return the new time."""
        return self.advance_to(self._now + require_ms("delta", delta))
