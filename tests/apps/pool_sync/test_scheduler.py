"""Tests for the single-flight polling scheduler."""

import asyncio
from collections.abc import AsyncIterator

import pytest

from fate_pools.apps.pool_sync.scheduler import PollingScheduler, SchedulerState

_INTERVAL = 0.01
_SEVERAL_INTERVALS = 0.06
_WAIT_TIMEOUT = 2.0
_RESULT = "snapshot"
_TWO_RESULTS = 2


class GatedFetch:
    """Fetch callable that blocks until released and counts invocations."""

    def __init__(self) -> None:
        """Start closed with no calls."""
        self.gate = asyncio.Event()
        self.calls = 0
        self.running = 0
        self.max_running = 0

    async def __call__(self) -> str:
        """Wait for the gate, tracking concurrency."""
        self.calls += 1
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await self.gate.wait()
        finally:
            self.running -= 1
        return _RESULT


class TestLifecycle:
    """Tests for start, stop and state transitions."""

    def test_interval_must_be_positive(self) -> None:
        """Test a zero interval is rejected."""

        async def fetch() -> None:
            return None

        with pytest.raises(ValueError, match="interval must be positive"):
            PollingScheduler(fetch, interval=0)

    @pytest.mark.asyncio
    async def test_idle_until_started(self) -> None:
        """Test a new scheduler is idle and start moves it to scheduled."""
        fetch = GatedFetch()
        scheduler = PollingScheduler(fetch, interval=_INTERVAL)
        assert scheduler.state is SchedulerState.IDLE

        scheduler.start()
        assert scheduler.state is SchedulerState.SCHEDULED
        assert fetch.calls == 0

        await scheduler.stop()
        assert scheduler.state is SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_ticks_deliver_results(self) -> None:
        """Test successive ticks call the fetch and deliver results."""
        results: list[str] = []
        delivered = asyncio.Event()

        async def fetch() -> str:
            return _RESULT

        def on_result(result: str) -> None:
            results.append(result)
            if len(results) >= _TWO_RESULTS:
                delivered.set()

        scheduler = PollingScheduler(fetch, interval=_INTERVAL, on_result=on_result)
        scheduler.start()
        await asyncio.wait_for(delivered.wait(), _WAIT_TIMEOUT)
        await scheduler.stop()

        assert results[:_TWO_RESULTS] == [_RESULT, _RESULT]

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self) -> None:
        """Test a second start neither restarts nor double-arms the timer."""
        fetch = GatedFetch()
        scheduler = PollingScheduler(fetch, interval=_INTERVAL)
        scheduler.start(immediate=True)
        scheduler.start(immediate=True)
        await asyncio.sleep(0)

        assert fetch.calls == 1
        fetch.gate.set()
        await scheduler.stop()
        await scheduler.wait_idle()


class TestSingleFlight:
    """Tests that at most one fetch runs at a time."""

    @pytest.mark.asyncio
    async def test_slow_fetch_skips_ticks(self) -> None:
        """Test ticks during a slow fetch are skipped, not queued."""
        fetch = GatedFetch()
        results: list[str] = []
        scheduler = PollingScheduler(fetch, interval=_INTERVAL, on_result=results.append)

        scheduler.start(immediate=True)
        await asyncio.sleep(_SEVERAL_INTERVALS)

        assert scheduler.state is SchedulerState.IN_FLIGHT
        assert fetch.calls == 1
        assert scheduler.skipped_ticks > 0

        fetch.gate.set()
        await scheduler.wait_idle()
        assert scheduler.state is SchedulerState.SCHEDULED
        assert results == [_RESULT]
        assert fetch.max_running == 1
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_ticking(self) -> None:
        """Test a failed fetch is retried on the next natural tick."""
        attempts = 0
        delivered = asyncio.Event()

        async def flaky() -> str:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                msg = "node unavailable"
                raise RuntimeError(msg)
            return _RESULT

        scheduler = PollingScheduler(
            flaky, interval=_INTERVAL, on_result=lambda _result: delivered.set()
        )
        scheduler.start(immediate=True)
        await asyncio.wait_for(delivered.wait(), _WAIT_TIMEOUT)
        await scheduler.stop()

        assert scheduler.failed_fetches == 1
        assert scheduler.completed_fetches >= 1

    @pytest.mark.asyncio
    async def test_callback_failure_is_logged_and_polling_continues(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a raising consumer callback neither stops ticks nor escapes the task."""
        delivered: list[str] = []
        second = asyncio.Event()

        async def fetch() -> str:
            return _RESULT

        def on_result(result: str) -> None:
            delivered.append(result)
            if len(delivered) == 1:
                msg = "display closed"
                raise RuntimeError(msg)
            second.set()

        scheduler = PollingScheduler(fetch, interval=_INTERVAL, on_result=on_result)
        scheduler.start(immediate=True)
        await asyncio.wait_for(second.wait(), _WAIT_TIMEOUT)
        await scheduler.stop()
        await scheduler.wait_idle()

        assert len(delivered) >= _TWO_RESULTS
        assert scheduler.failed_callbacks == 1
        assert scheduler.failed_fetches == 0
        assert "Result callback failed" in caplog.text


class TestStop:
    """Tests for teardown while a fetch is in flight."""

    @pytest.mark.asyncio
    async def test_result_after_stop_is_discarded(self) -> None:
        """Test an in-flight fetch completes but its result is dropped."""
        fetch = GatedFetch()
        results: list[str] = []
        scheduler = PollingScheduler(fetch, interval=_INTERVAL, on_result=results.append)

        scheduler.start(immediate=True)
        await asyncio.sleep(0)
        await scheduler.stop()
        assert scheduler.state is SchedulerState.IDLE

        fetch.gate.set()
        await scheduler.wait_idle()

        assert scheduler.completed_fetches == 1
        assert results == []

    @pytest.mark.asyncio
    async def test_no_ticks_after_stop(self) -> None:
        """Test the timer is cancelled on stop."""
        fetch = GatedFetch()
        fetch.gate.set()
        scheduler = PollingScheduler(fetch, interval=_INTERVAL)
        scheduler.start()
        await scheduler.stop()
        await asyncio.sleep(_SEVERAL_INTERVALS)

        assert fetch.calls == 0


class TestVisibility:
    """Tests for pausing while hidden."""

    @pytest.mark.asyncio
    async def test_hidden_suspends_ticks(self) -> None:
        """Test no fetch starts while hidden and ticking resumes when visible."""
        fetch = GatedFetch()
        fetch.gate.set()
        scheduler = PollingScheduler(fetch, interval=_INTERVAL)
        scheduler.on_visibility_change(False)

        scheduler.start(immediate=True)
        await asyncio.sleep(_SEVERAL_INTERVALS)
        assert fetch.calls == 0
        assert scheduler.state is SchedulerState.SCHEDULED

        scheduler.on_visibility_change(True)
        await asyncio.sleep(_SEVERAL_INTERVALS)
        assert fetch.calls > 0
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_hiding_does_not_cancel_in_flight(self) -> None:
        """Test an in-flight fetch survives hiding and still delivers."""
        fetch = GatedFetch()
        results: list[str] = []
        scheduler = PollingScheduler(fetch, interval=_INTERVAL, on_result=results.append)

        scheduler.start(immediate=True)
        await asyncio.sleep(0)
        scheduler.on_visibility_change(False)
        assert scheduler.state is SchedulerState.IN_FLIGHT

        fetch.gate.set()
        await scheduler.wait_idle()
        await asyncio.sleep(_SEVERAL_INTERVALS)

        assert results == [_RESULT]
        assert fetch.calls == 1
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_follow_visibility_stream(self) -> None:
        """Test visibility flags from a stream are applied in order."""
        scheduler = PollingScheduler(GatedFetch(), interval=_INTERVAL)
        seen: list[bool] = []

        async def stream() -> AsyncIterator[bool]:
            for visible in (False, True, False):
                yield visible
                seen.append(scheduler.visible)

        await scheduler.follow_visibility(stream())

        assert seen == [False, True, False]
        assert scheduler.visible is False
