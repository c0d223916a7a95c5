import asyncio
from typing import Any, List

import pytest

from widget_pipeline.core.exceptions import RequestDeferred, TransportError
from widget_pipeline.services.lifecycle import (
    Phase,
    RefreshBus,
    RetryPolicy,
    RetryScheduler,
    WidgetController,
)


class ScriptedExecutor:
    """Returns (or raises) queued outcomes; the last one repeats."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes) or [[]]
        self.calls: List[dict] = []

    async def execute(self, config, context=None):
        self.calls.append(dict(context or {}))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Gate):
            await outcome.event.wait()
            outcome = outcome.result
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class Gate:
    """Outcome that completes only once opened."""

    def __init__(self, result: Any) -> None:
        self.event = asyncio.Event()
        self.result = result

    def open(self) -> None:
        self.event.set()


def test_preview_data_short_circuits_everything(make_config):
    async def scenario():
        executor = ScriptedExecutor()
        bus = RefreshBus()
        ctrl = WidgetController(make_config(refreshInterval=30), executor, bus, preview_data=[{"a": 1}])
        await ctrl.mount()
        return ctrl, executor, bus

    ctrl, executor, bus = asyncio.run(scenario())
    assert ctrl.state.phase == Phase.LOADED
    assert ctrl.state.data == [{"a": 1}]
    assert executor.calls == []
    assert bus.keys() == []
    assert ctrl.render().kind == "table"


def test_mount_fetches_once_with_resolved_context(make_config):
    async def scenario():
        executor = ScriptedExecutor({"count": 3})
        ctrl = WidgetController(
            make_config(displayType="metric"), executor, RefreshBus(), path="/clients/42",
        )
        await ctrl.mount()
        return ctrl, executor

    ctrl, executor = asyncio.run(scenario())
    assert executor.calls == [{"clientId": 42}]
    assert ctrl.state.phase == Phase.LOADED
    assert ctrl.state.last_updated_at is not None
    assert ctrl.render().data["value"] == 3


def test_invalid_custom_query_goes_straight_to_error(executor, gateway, make_config):
    config = make_config(queryType="custom", customQuery="", queryId=None)

    async def scenario():
        ctrl = WidgetController(config, executor, RefreshBus())
        await ctrl.mount()
        return ctrl

    ctrl = asyncio.run(scenario())
    assert ctrl.state.phase == Phase.ERROR
    assert ctrl.state.error_message.startswith("Invalid widget configuration")
    assert ctrl.retry.pending is None
    assert gateway.call_count == 0


def test_cooldown_deferral_is_silent_and_scheduled(executor, gateway, clock, limiter, make_config):
    config = make_config()
    limiter.record_admission(config.rate_limit_key)
    clock.advance(20)

    async def scenario():
        ctrl = WidgetController(config, executor, RefreshBus())
        await ctrl.mount()
        snapshot = (ctrl.state.phase, ctrl.state.error_message, ctrl.retry.pending)
        ctrl.unmount()
        return ctrl, snapshot

    ctrl, (phase, error, pending) = asyncio.run(scenario())
    assert gateway.call_count == 0
    assert phase == Phase.LOADING
    assert error is None
    assert pending.reason == RequestDeferred.COOLDOWN
    assert pending.delay == pytest.approx(41.0)
    assert ctrl.retry.pending is None


def test_upstream_rate_limit_schedules_65_second_retry(make_config):
    async def scenario():
        executor = ScriptedExecutor(RequestDeferred(65, RequestDeferred.UPSTREAM_RATE_LIMIT))
        ctrl = WidgetController(make_config(), executor, RefreshBus())
        await ctrl.mount()
        pending = ctrl.retry.pending
        ctrl.unmount()
        return ctrl, pending

    ctrl, pending = asyncio.run(scenario())
    assert pending.delay == 65
    assert pending.reason == RequestDeferred.UPSTREAM_RATE_LIMIT
    assert ctrl.state.error_message is None


def test_thrown_rate_limit_error_is_deferred_not_shown(make_config):
    async def scenario():
        executor = ScriptedExecutor(RuntimeError("429 Too Many Requests"))
        ctrl = WidgetController(make_config(), executor, RefreshBus())
        await ctrl.mount()
        pending = ctrl.retry.pending
        ctrl.unmount()
        return ctrl, pending

    ctrl, pending = asyncio.run(scenario())
    assert pending.delay == 65
    assert ctrl.state.phase != Phase.ERROR


def test_failed_refresh_keeps_previous_data(make_config):
    async def scenario():
        executor = ScriptedExecutor([{"a": 1}], TransportError("HTTP 500: boom", status=500))
        ctrl = WidgetController(make_config(), executor, RefreshBus())
        await ctrl.mount()
        await ctrl.refresh()
        return ctrl

    ctrl = asyncio.run(scenario())
    assert ctrl.state.phase == Phase.ERROR
    assert ctrl.state.error_message == "HTTP 500: boom"
    assert ctrl.state.data == [{"a": 1}]


def test_unexpected_exception_becomes_error_phase(make_config):
    async def scenario():
        ctrl = WidgetController(make_config(), ScriptedExecutor(KeyError("x")), RefreshBus())
        await ctrl.mount()
        return ctrl

    assert asyncio.run(scenario()).state.phase == Phase.ERROR


def test_loading_shown_only_without_data(make_config):
    changes: List[bool] = []

    async def scenario():
        executor = ScriptedExecutor([1], [2])
        ctrl = WidgetController(
            make_config(), executor, RefreshBus(), on_loading_change=changes.append,
        )
        await ctrl.mount()
        await ctrl.refresh()
        return ctrl

    ctrl = asyncio.run(scenario())
    assert changes == [True, False]
    assert ctrl.state.data == [2]


def test_stale_completion_is_discarded(make_config):
    async def scenario():
        slow = Gate(["old"])
        executor = ScriptedExecutor(["first"], slow, ["new"])
        ctrl = WidgetController(make_config(), executor, RefreshBus())
        await ctrl.mount()

        stale = asyncio.create_task(ctrl.fetch())
        await asyncio.sleep(0)
        await ctrl.fetch()
        slow.open()
        await stale
        return ctrl

    ctrl = asyncio.run(scenario())
    assert ctrl.state.data == ["new"]


def test_completion_after_unmount_is_ignored(make_config):
    async def scenario():
        slow = Gate(["late"])
        ctrl = WidgetController(make_config(), ScriptedExecutor(slow), RefreshBus())
        mounting = asyncio.create_task(ctrl.mount())
        await asyncio.sleep(0)
        ctrl.unmount()
        slow.open()
        await mounting
        return ctrl

    ctrl = asyncio.run(scenario())
    assert ctrl.state.data is None
    assert not ctrl.mounted


def test_bus_broadcast_triggers_out_of_band_fetch(make_config):
    async def scenario():
        executor = ScriptedExecutor([1], [2])
        bus = RefreshBus()
        ctrl = WidgetController(make_config(), executor, bus)
        await ctrl.mount()
        assert bus.broadcast(ctrl.key)
        for _ in range(3):
            await asyncio.sleep(0)
        ctrl.unmount()
        return ctrl, executor, bus

    ctrl, executor, bus = asyncio.run(scenario())
    assert len(executor.calls) == 2
    assert ctrl.state.data == [2]
    assert bus.broadcast(ctrl.key) is False


def test_interval_task_cancelled_on_unmount(make_config):
    async def scenario():
        ctrl = WidgetController(make_config(refreshInterval=300), ScriptedExecutor(), RefreshBus())
        await ctrl.mount()
        task = ctrl._interval_task
        ctrl.unmount()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        return task

    task = asyncio.run(scenario())
    assert task.cancelled()


def test_retry_scheduler_keeps_a_single_pending_retry():
    fired: List[int] = []

    async def scenario():
        scheduler = RetryScheduler(RetryPolicy(), callback=lambda: fired.append(1))
        scheduler.schedule(RequestDeferred(30, RequestDeferred.COOLDOWN))
        scheduler.schedule(RequestDeferred(0.01, RequestDeferred.COOLDOWN))
        await asyncio.sleep(0.05)
        return scheduler

    scheduler = asyncio.run(scenario())
    assert fired == [1]
    assert scheduler.pending is None
    assert scheduler.attempts == 2


def test_retry_policy_max_attempts_and_upstream_override():
    policy = RetryPolicy(max_attempts=1, upstream_delay=5)
    assert policy.delay_for(RequestDeferred(65, RequestDeferred.UPSTREAM_RATE_LIMIT)) == 5
    assert policy.delay_for(RequestDeferred(12, RequestDeferred.COOLDOWN)) == 12

    async def scenario():
        scheduler = RetryScheduler(policy)
        first = scheduler.schedule(RequestDeferred(1, RequestDeferred.COOLDOWN))
        second = scheduler.schedule(RequestDeferred(1, RequestDeferred.COOLDOWN))
        return first, second, scheduler.pending

    first, second, pending = asyncio.run(scenario())
    assert (first, second, pending) == (True, False, None)


def test_deferred_refresh_does_not_discard_in_flight_response(make_config):
    async def scenario():
        first = Gate([{"k": 1}])
        executor = ScriptedExecutor(first, RequestDeferred(41, RequestDeferred.COOLDOWN))
        ctrl = WidgetController(make_config(), executor, RefreshBus())
        mounting = asyncio.create_task(ctrl.mount())
        await asyncio.sleep(0)
        await ctrl.refresh()
        first.open()
        await mounting
        pending = ctrl.retry.pending
        ctrl.unmount()
        return ctrl, executor, pending

    ctrl, executor, pending = asyncio.run(scenario())
    assert len(executor.calls) == 2
    assert ctrl.state.phase == Phase.LOADED
    assert ctrl.state.data == [{"k": 1}]
    assert pending.reason == RequestDeferred.COOLDOWN


def test_error_phase_renders_message_instead_of_kept_data(make_config):
    async def scenario():
        executor = ScriptedExecutor(
            [{"a": 1}], TransportError("HTTP 500: boom", status=500), [{"b": 2}],
        )
        ctrl = WidgetController(make_config(displayType="table"), executor, RefreshBus())
        await ctrl.mount()
        await ctrl.refresh()
        failed = ctrl.render()
        await ctrl.refresh()
        return ctrl, failed

    ctrl, failed = asyncio.run(scenario())
    assert failed.is_placeholder
    assert failed.data["message"] == "HTTP 500: boom"
    assert failed.metadata["error"] is True
    recovered = ctrl.render()
    assert not recovered.is_placeholder
    assert recovered.data["rows"] == [{"b": 2}]


def test_loading_without_data_renders_loading_placeholder(make_config):
    async def scenario():
        executor = ScriptedExecutor(RequestDeferred(65, RequestDeferred.UPSTREAM_RATE_LIMIT))
        ctrl = WidgetController(make_config(), executor, RefreshBus())
        await ctrl.mount()
        result = ctrl.render()
        ctrl.unmount()
        return result

    result = asyncio.run(scenario())
    assert result.is_placeholder
    assert result.metadata["loading"] is True
    assert "error" not in result.metadata


def test_broadcast_all_signals_every_subscribed_key():
    bus = RefreshBus()
    hits: List[str] = []
    bus.subscribe("a", lambda: hits.append("a"))
    unsubscribe = bus.subscribe("b", lambda: hits.append("b"))

    assert bus.broadcast_all() == 2
    assert hits == ["a", "b"]

    unsubscribe()
    assert bus.broadcast_all() == 1
