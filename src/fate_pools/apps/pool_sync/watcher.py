"""Keep one pool's state fresh and report which fields moved on each poll."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from fate_pools.apps.pool_sync.changes import ChangeMask, diff_snapshots
from fate_pools.apps.pool_sync.scheduler import PollingScheduler, SchedulerState

if TYPE_CHECKING:
    from collections.abc import Callable

    from fate_pools.apps.pool_sync.fetcher import PoolStateFetcher
    from fate_pools.apps.pool_sync.models import PoolState

logger = logging.getLogger(__name__)


class PoolWatcher:
    """Poll a pool through a ``PollingScheduler`` and diff successive snapshots.

    Args:
        fetcher: Fetcher used on every tick.
        pool_id: Pool to watch.
        interval: Seconds between polls.
        user_address: Address whose position to include, if any.
        on_update: Called with the new state and its change mask.

    """

    def __init__(  # noqa: PLR0913
        self,
        fetcher: PoolStateFetcher,
        pool_id: str,
        *,
        interval: float,
        user_address: str | None = None,
        on_update: Callable[[PoolState, ChangeMask], None] | None = None,
    ) -> None:
        """Initialize the watcher without starting it.

        Args:
            fetcher: Fetcher used on every tick.
            pool_id: Pool to watch.
            interval: Seconds between polls.
            user_address: Address whose position to include, if any.
            on_update: Called with the new state and its change mask.

        """
        self._fetcher = fetcher
        self._pool_id = pool_id
        self._user_address = user_address
        self._on_update = on_update
        self.latest: PoolState | None = None
        self.last_mask: ChangeMask | None = None
        self.last_updated: float | None = None
        self.updates = 0
        self.scheduler = PollingScheduler(self._fetch, interval=interval, on_result=self._apply)

    @property
    def pool_id(self) -> str:
        """Return the watched pool's id."""
        return self._pool_id

    @property
    def state(self) -> SchedulerState:
        """Return the underlying scheduler state."""
        return self.scheduler.state

    def start(self, initial: PoolState | None = None) -> None:
        """Begin polling at the configured interval.

        Args:
            initial: Already fetched state to use as the baseline.  Without
                one the first fetch runs immediately.

        """
        logger.info("Watching pool %s every %.1fs", self._pool_id, self.scheduler.interval)
        if initial is not None:
            self._apply(initial)
        self.scheduler.start(immediate=initial is None)

    async def stop(self) -> None:
        """Stop polling; a fetch already in flight is discarded."""
        await self.scheduler.stop()

    def on_visibility_change(self, visible: bool) -> None:  # noqa: FBT001
        """Forward a visibility change to the scheduler."""
        self.scheduler.on_visibility_change(visible)

    async def _fetch(self) -> PoolState:
        return await self._fetcher.fetch(self._pool_id, self._user_address)

    def _apply(self, state: PoolState) -> None:
        previous = self.latest.snapshot if self.latest is not None else None
        mask = diff_snapshots(previous, state.snapshot)
        self.latest = state
        self.last_mask = mask
        self.last_updated = time.time()
        self.updates += 1
        if mask.any_changed:
            logger.info("Pool %s changed: %s", self._pool_id, ", ".join(sorted(mask.changed)))
        if self._on_update is not None:
            self._on_update(state, mask)
