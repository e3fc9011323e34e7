"""Promise-style chains whose reactions run as scheduler microtasks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loopsim.runtime.scheduler import Scheduler

_LOG = logging.getLogger("loopsim.promises")

Handler = Callable[[Any], Any]
Executor = Callable[[Callable[[Any], None], Callable[[BaseException | Any], None]], None]


class PromiseState(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class Promise:
    """Minimal thenable bound to one scheduler.

    Settling never runs reactions inline: every reaction is queued as a
    microtask, and resolving with another promise adopts its state through
    one extra microtask, matching the ordering of thenable resolution.
    """

    def __init__(self, scheduler: Scheduler, executor: Executor | None = None) -> None:
        self._scheduler = scheduler
        self._state = PromiseState.PENDING
        self._value: Any = None
        self._reactions: list[tuple[Handler | None, Handler | None, Promise]] = []
        self._locked = False
        if executor is not None:
            try:
                executor(self.resolve, self.reject)
            except Exception as exc:
                self.reject(exc)

    @classmethod
    def resolved(cls, scheduler: Scheduler, value: Any = None) -> Promise:
        if isinstance(value, Promise) and value._scheduler is scheduler:
            return value
        promise = cls(scheduler)
        promise.resolve(value)
        return promise

    @classmethod
    def rejected(cls, scheduler: Scheduler, reason: Any) -> Promise:
        promise = cls(scheduler)
        promise.reject(reason)
        return promise

    @property
    def state(self) -> PromiseState:
        return self._state

    @property
    def value(self) -> Any:
        return self._value if self._state is PromiseState.FULFILLED else None

    @property
    def reason(self) -> Any:
        return self._value if self._state is PromiseState.REJECTED else None

    def resolve(self, value: Any = None) -> None:
        if self._locked:
            return
        self._locked = True
        if value is self:
            self._settle(PromiseState.REJECTED, TypeError("promise resolved with itself"))
            return
        if isinstance(value, Promise):
            self._scheduler.schedule_microtask(
                lambda: value.then(self._adopt_fulfilled, self._adopt_rejected),
                label="promise.adopt",
            )
            return
        self._settle(PromiseState.FULFILLED, value)

    def reject(self, reason: Any = None) -> None:
        if self._locked:
            return
        self._locked = True
        self._settle(PromiseState.REJECTED, reason)

    def then(
        self,
        on_fulfilled: Handler | None = None,
        on_rejected: Handler | None = None,
    ) -> Promise:
        derived = Promise(self._scheduler)
        reaction = (on_fulfilled, on_rejected, derived)
        if self._state is PromiseState.PENDING:
            self._reactions.append(reaction)
        else:
            self._queue_reaction(reaction)
        return derived

    def catch(self, on_rejected: Handler) -> Promise:
        return self.then(None, on_rejected)

    def _adopt_fulfilled(self, value: Any) -> None:
        self._settle(PromiseState.FULFILLED, value)

    def _adopt_rejected(self, reason: Any) -> None:
        self._settle(PromiseState.REJECTED, reason)

    def _settle(self, state: PromiseState, value: Any) -> None:
        if self._state is not PromiseState.PENDING:
            return
        self._state = state
        self._value = value
        reactions, self._reactions = self._reactions, []
        if state is PromiseState.REJECTED and not reactions:
            _LOG.debug("promise_rejected_without_handler reason=%r", value)
        for reaction in reactions:
            self._queue_reaction(reaction)

    def _queue_reaction(self, reaction: tuple[Handler | None, Handler | None, Promise]) -> None:
        on_fulfilled, on_rejected, derived = reaction
        state = self._state
        value = self._value

        def job() -> None:
            handler = on_fulfilled if state is PromiseState.FULFILLED else on_rejected
            if handler is None:
                if state is PromiseState.FULFILLED:
                    derived.resolve(value)
                else:
                    derived.reject(value)
                return
            try:
                result = handler(value)
            except Exception as exc:
                derived.reject(exc)
                return
            derived.resolve(result)

        self._scheduler.schedule_microtask(job, label=f"promise.{state.value}")
