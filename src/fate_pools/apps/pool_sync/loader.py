"""Load many pools concurrently and merge results as they arrive.

Each load owns a fresh ``PoolLoadSession``; nothing is kept at module level.
Completions are merged one at a time on the event loop, so the keyed result
map never sees concurrent writers.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fate_pools.apps.pool_sync.errors import PoolNotFound, PoolSchemaError
from fate_pools.clients.sui.exceptions import QueryError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from fate_pools.apps.pool_sync.fetcher import PoolStateFetcher
    from fate_pools.apps.pool_sync.models import PoolState

logger = logging.getLogger(__name__)

_RECORDED_FAILURES = (PoolNotFound, PoolSchemaError, QueryError)


@dataclass
class PoolLoadSession:
    """Progress and results of one concurrent load.

    Attributes:
        expected: Number of pool fetches dispatched.
        loaded: Number of fetches that have settled, successfully or not.
        results: Successful states keyed by pool id.
        failures: Recorded failures keyed by pool id.

    """

    expected: int
    loaded: int = 0
    results: dict[str, PoolState] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)

    @property
    def loading(self) -> bool:
        """Return True until every dispatched fetch has settled."""
        return self.loaded < self.expected

    @property
    def confirmed_empty(self) -> bool:
        """Return True when there was nothing to load."""
        return self.expected == 0

    def merge(self, pool_id: str, state: PoolState) -> None:
        """Insert or replace the state for ``pool_id`` and count it as settled."""
        self.results[pool_id] = state
        self.failures.pop(pool_id, None)
        self.loaded += 1

    def record_failure(self, pool_id: str, error: Exception) -> None:
        """Record a failed fetch and count it as settled."""
        self.failures[pool_id] = error
        self.loaded += 1


class ConcurrentPoolLoader:
    """Fan out one ``PoolStateFetcher.fetch`` per pool id.

    Args:
        fetcher: Fetcher used for every pool.

    """

    def __init__(self, fetcher: PoolStateFetcher) -> None:
        """Initialize the loader.

        Args:
            fetcher: Fetcher used for every pool.

        """
        self._fetcher = fetcher

    async def load(
        self,
        pool_ids: Sequence[str],
        user_address: str | None = None,
        on_update: Callable[[PoolLoadSession], None] | None = None,
    ) -> PoolLoadSession:
        """Fetch every pool concurrently.

        Failures of individual pools are recorded on the session and do not
        affect the others.  ``on_update`` is called after each merge so
        callers can render partial results.

        Args:
            pool_ids: Pools to fetch; duplicates are fetched once.
            user_address: Address whose positions to read, if any.
            on_update: Called with the session after every settled fetch.

        Returns:
            The settled session.

        """
        unique_ids = list(dict.fromkeys(pool_ids))
        session = PoolLoadSession(expected=len(unique_ids))
        if not unique_ids:
            logger.info("No pools to load")
            return session

        tasks = [
            asyncio.create_task(self._fetch_one(pool_id, user_address)) for pool_id in unique_ids
        ]
        try:
            for next_done in asyncio.as_completed(tasks):
                pool_id, state, error = await next_done
                if state is not None:
                    session.merge(pool_id, state)
                elif error is not None:
                    session.record_failure(pool_id, error)
                if on_update is not None:
                    on_update(session)
        finally:
            for task in tasks:
                task.cancel()

        logger.info(
            "Loaded %d/%d pools (%d failed)",
            len(session.results),
            session.expected,
            len(session.failures),
        )
        return session

    async def _fetch_one(
        self, pool_id: str, user_address: str | None
    ) -> tuple[str, PoolState | None, Exception | None]:
        try:
            state = await self._fetcher.fetch(pool_id, user_address)
        except _RECORDED_FAILURES as exc:
            logger.warning("Pool %s failed to load: %s", pool_id, exc)
            return pool_id, None, exc
        return pool_id, state, None
