from __future__ import annotations

import logging

from loopsim.runtime.promises import Promise, PromiseState


def test_then_runs_as_microtask_after_sync_code(browser) -> None:
    log: list[str] = []
    log.append("start")
    browser.schedule_timer(lambda: log.append("timeout"), 0)
    Promise.resolved(browser).then(lambda _: log.append("p1")).then(lambda _: log.append("p2"))
    log.append("end")

    browser.run()

    assert log == ["start", "end", "p1", "p2", "timeout"]


def test_independent_chains_interleave_one_step_at_a_time(browser) -> None:
    log: list[str] = []
    Promise.resolved(browser).then(lambda _: log.append("a1")).then(lambda _: log.append("a2"))
    Promise.resolved(browser).then(lambda _: log.append("b1")).then(lambda _: log.append("b2"))

    browser.run()

    assert log == ["a1", "b1", "a2", "b2"]


def test_values_flow_through_chain(browser) -> None:
    seen: list[int] = []
    Promise.resolved(browser, 2).then(lambda v: v * 10).then(lambda v: seen.append(v + 1))

    browser.run()

    assert seen == [21]


def test_rejection_skips_fulfilment_handlers_until_catch(browser) -> None:
    log: list[str] = []
    error = ValueError("bad")
    (
        Promise.rejected(browser, error)
        .then(lambda _: log.append("skipped"))
        .catch(lambda exc: log.append(type(exc).__name__))
    )

    browser.run()

    assert log == ["ValueError"]


def test_handler_exception_rejects_derived_promise_without_task_failure(browser, observer) -> None:
    browser.add_observer(observer)
    reasons: list[str] = []

    def explode(_: object) -> None:
        raise KeyError("missing")

    Promise.resolved(browser).then(explode).catch(lambda exc: reasons.append(repr(exc)))

    browser.run()

    assert reasons == ["KeyError('missing')"]
    assert observer.failed == []


def test_executor_runs_synchronously_and_can_reject(browser) -> None:
    log: list[str] = []

    def executor(resolve, reject) -> None:
        log.append("executor")
        raise RuntimeError("sync failure")

    promise = Promise(browser, executor)
    log.append("after")

    assert log == ["executor", "after"]
    assert promise.state is PromiseState.REJECTED
    assert isinstance(promise.reason, RuntimeError)
    assert promise.value is None


def test_resolve_from_timer_releases_waiting_reactions(browser) -> None:
    log: list[str] = []
    pending = Promise(browser)
    pending.then(lambda v: log.append(f"got {v}"))
    browser.schedule_timer(lambda: pending.resolve("data"), 10)
    browser.schedule_timer(lambda: log.append("later timer"), 10)

    browser.run()

    assert log == ["got data", "later timer"]
    assert pending.state is PromiseState.FULFILLED
    assert pending.value == "data"


def test_adopting_a_promise_costs_extra_microtask_steps(browser) -> None:
    log: list[str] = []
    inner = Promise.resolved(browser, 1)
    Promise(browser, lambda resolve, reject: resolve(inner)).then(lambda _: log.append("outer"))
    (
        Promise.resolved(browser)
        .then(lambda _: log.append("a"))
        .then(lambda _: log.append("b"))
        .then(lambda _: log.append("c"))
    )

    browser.run()

    assert log == ["a", "b", "outer", "c"]


def test_settled_promise_ignores_later_resolution(browser) -> None:
    promise = Promise(browser)
    promise.resolve(1)
    promise.reject(ValueError("late"))
    promise.resolve(2)

    assert promise.state is PromiseState.FULFILLED
    assert promise.value == 1


def test_resolving_with_itself_rejects(browser) -> None:
    promise = Promise(browser)
    promise.resolve(promise)

    assert promise.state is PromiseState.REJECTED
    assert isinstance(promise.reason, TypeError)


def test_resolved_returns_same_promise_for_same_scheduler(browser) -> None:
    promise = Promise.resolved(browser, 5)
    assert Promise.resolved(browser, promise) is promise


def test_rejection_without_handler_is_logged(browser, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="loopsim.promises"):
        Promise.rejected(browser, ValueError("lost"))
        handled = Promise(browser)
        handled.catch(lambda reason: None)
        handled.reject(ValueError("seen"))
        browser.run()

    messages = [record.getMessage() for record in caplog.records if record.name == "loopsim.promises"]
    assert len(messages) == 1
    assert "promise_rejected_without_handler" in messages[0]
    assert "lost" in messages[0]
