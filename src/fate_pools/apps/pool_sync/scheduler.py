"""Fixed-interval polling with single-flight fetches and visibility pausing.

The scheduler is a three-state machine:

* ``IDLE``: not started, or stopped.
* ``SCHEDULED``: the timer is armed and no fetch is running.
* ``IN_FLIGHT``: a fetch is running.  Ticks keep arriving but are skipped,
  so at most one fetch runs at any instant.

While the consumer is hidden the timer is suspended without touching an
in-flight fetch.  A failed fetch is logged and the next attempt is simply
the next tick; backoff is left to the caller.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Lifecycle state of a ``PollingScheduler``."""

    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"


class PollingScheduler:
    """Invoke an async fetch every ``interval`` seconds, one at a time.

    Args:
        fetch: Zero-argument coroutine function performing one fetch.
        interval: Seconds between ticks.
        on_result: Called with each successful fetch result while running.

    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Any]],
        *,
        interval: float,
        on_result: Callable[[Any], None] | None = None,
    ) -> None:
        """Initialize an idle scheduler.

        Args:
            fetch: Zero-argument coroutine function performing one fetch.
            interval: Seconds between ticks.
            on_result: Called with each successful fetch result while running.

        Raises:
            ValueError: If ``interval`` is not positive.

        """
        if interval <= 0:
            msg = f"interval must be positive, got {interval}"
            raise ValueError(msg)
        self._fetch = fetch
        self._interval = interval
        self._on_result = on_result
        self._running = False
        self._visible = True
        self._generation = 0
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: asyncio.Task[None] | None = None
        self.skipped_ticks = 0
        self.completed_fetches = 0
        self.failed_fetches = 0
        self.failed_callbacks = 0

    @property
    def state(self) -> SchedulerState:
        """Return the current lifecycle state."""
        if not self._running:
            return SchedulerState.IDLE
        if self._in_flight is not None and not self._in_flight.done():
            return SchedulerState.IN_FLIGHT
        return SchedulerState.SCHEDULED

    @property
    def visible(self) -> bool:
        """Return True when ticks are allowed to start fetches."""
        return self._visible

    @property
    def interval(self) -> float:
        """Return the tick interval in seconds."""
        return self._interval

    def start(self, *, immediate: bool = False) -> None:
        """Arm the timer.  Calling ``start`` on a running scheduler is a no-op.

        Must be called from within a running event loop.

        Args:
            immediate: Fire the first tick now instead of after one interval.

        """
        if self._running:
            return
        self._running = True
        self._generation += 1
        logger.debug("Polling started every %.1fs", self._interval)
        if self._visible:
            self._arm_timer()
            if immediate:
                self._tick()

    async def stop(self) -> None:
        """Cancel the timer and return to ``IDLE``.

        An in-flight fetch is left to finish but its result is discarded.
        """
        if not self._running:
            return
        self._running = False
        self._generation += 1
        await self._cancel_timer()
        logger.debug("Polling stopped")

    def on_visibility_change(self, visible: bool) -> None:  # noqa: FBT001
        """Suspend the timer when hidden and resume it when visible again.

        Args:
            visible: New visibility of the consumer.

        """
        if visible == self._visible:
            return
        self._visible = visible
        if not self._running:
            return
        if visible:
            logger.debug("Visible again, resuming polling")
            self._arm_timer()
        else:
            logger.debug("Hidden, suspending polling")
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    async def follow_visibility(self, stream: AsyncIterator[bool]) -> None:
        """Apply every visibility value from ``stream`` until it is exhausted.

        Args:
            stream: Async iterator of visibility flags.

        """
        async for visible in stream:
            self.on_visibility_change(visible)

    async def wait_idle(self) -> None:
        """Wait for the current in-flight fetch, if any, to settle."""
        if self._in_flight is not None:
            await asyncio.wait({self._in_flight})

    def _arm_timer(self) -> None:
        if self._timer is None or self._timer.done():
            self._timer = asyncio.create_task(self._run_timer())

    async def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.cancel()
        if timer is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await timer

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._tick()

    def _tick(self) -> None:
        if not self._running or not self._visible:
            return
        if self._in_flight is not None and not self._in_flight.done():
            self.skipped_ticks += 1
            logger.debug("Tick skipped, previous fetch still in flight")
            return
        self._in_flight = asyncio.create_task(self._run_fetch(self._generation))

    async def _run_fetch(self, generation: int) -> None:
        try:
            result = await self._fetch()
        except Exception:
            self.failed_fetches += 1
            logger.exception("Polling fetch failed, retrying on next tick")
            return
        self.completed_fetches += 1
        if generation != self._generation:
            logger.debug("Discarding result fetched before stop")
            return
        if self._on_result is None:
            return
        try:
            self._on_result(result)
        except Exception:
            self.failed_callbacks += 1
            logger.exception("Result callback failed, polling continues")
