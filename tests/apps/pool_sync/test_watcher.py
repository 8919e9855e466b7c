"""Tests for the single-pool watcher."""

import asyncio

import pytest
from fakes import FakeQueryClient, pool_fields

from fate_pools.apps.pool_sync.changes import ChangeMask
from fate_pools.apps.pool_sync.fetcher import PoolStateFetcher
from fate_pools.apps.pool_sync.models import PoolState
from fate_pools.apps.pool_sync.scheduler import SchedulerState
from fate_pools.apps.pool_sync.watcher import PoolWatcher

_PACKAGE = "0x" + "11" * 32
_POOL_ID = "0x" + "aa" * 32
_INTERVAL = 0.01
_WAIT_TIMEOUT = 2.0
_TWO_UPDATES = 2
_NEW_RESERVE = 2_000_000_000


class TestPoolWatcher:
    """Test suite for PoolWatcher."""

    @pytest.fixture
    def fetcher(self, fake_client: FakeQueryClient) -> PoolStateFetcher:
        """Create a fetcher over the in-memory client with one pool."""
        fake_client.objects[_POOL_ID] = pool_fields()
        return PoolStateFetcher(fake_client, _PACKAGE)

    @pytest.mark.asyncio
    async def test_initial_state_is_baseline(self, fetcher: PoolStateFetcher) -> None:
        """Test the seeded state is applied at once with nothing flagged."""
        updates: list[tuple[PoolState, ChangeMask]] = []
        initial = await fetcher.fetch(_POOL_ID)
        watcher = PoolWatcher(
            fetcher,
            _POOL_ID,
            interval=_INTERVAL,
            on_update=lambda state, mask: updates.append((state, mask)),
        )

        watcher.start(initial)

        assert watcher.latest is initial
        assert watcher.updates == 1
        assert watcher.last_updated is not None
        assert len(updates) == 1
        assert not updates[0][1].any_changed
        assert watcher.state is SchedulerState.SCHEDULED
        await watcher.stop()

    @pytest.mark.asyncio
    async def test_change_is_flagged(
        self, fetcher: PoolStateFetcher, fake_client: FakeQueryClient
    ) -> None:
        """Test a reserve moving between polls is reported in the mask."""
        masks: list[ChangeMask] = []
        second = asyncio.Event()

        def on_update(_state: PoolState, mask: ChangeMask) -> None:
            masks.append(mask)
            if len(masks) >= _TWO_UPDATES:
                second.set()

        watcher = PoolWatcher(fetcher, _POOL_ID, interval=_INTERVAL, on_update=on_update)
        watcher.start(await fetcher.fetch(_POOL_ID))
        fake_client.objects[_POOL_ID] = pool_fields(bull_reserve=_NEW_RESERVE)

        await asyncio.wait_for(second.wait(), _WAIT_TIMEOUT)
        await watcher.stop()

        assert masks[1].changed == frozenset({"bull_reserve"})
        assert watcher.last_mask is not None
        assert watcher.latest is not None
        assert watcher.latest.snapshot.bull_reserve == _NEW_RESERVE

    @pytest.mark.asyncio
    async def test_without_initial_fetches_immediately(
        self, fetcher: PoolStateFetcher, fake_client: FakeQueryClient
    ) -> None:
        """Test starting without a baseline triggers an immediate fetch."""
        watcher = PoolWatcher(fetcher, _POOL_ID, interval=60.0)

        watcher.start()
        await watcher.scheduler.wait_idle()
        await watcher.stop()

        assert fake_client.reads == [_POOL_ID]
        assert watcher.updates == 1
        assert watcher.latest is not None
        assert watcher.state is SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_stop_prevents_further_updates(self, fetcher: PoolStateFetcher) -> None:
        """Test no update is applied after stop."""
        watcher = PoolWatcher(fetcher, _POOL_ID, interval=_INTERVAL)
        watcher.start(await fetcher.fetch(_POOL_ID))
        await watcher.stop()
        await asyncio.sleep(_INTERVAL * 5)

        assert watcher.updates == 1
        assert watcher.pool_id == _POOL_ID
