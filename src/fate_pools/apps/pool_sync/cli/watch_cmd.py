"""CLI command for watching a single pool for changes.

Poll the pool at a fixed interval and print every update, marking the
fields that moved since the previous poll.  Runs until Ctrl-C or until
``--max-ticks`` updates have been printed.
"""

import asyncio
import signal
from typing import Annotated

import typer

from fate_pools.apps.pool_sync.changes import ChangeMask
from fate_pools.apps.pool_sync.cli._helpers import (
    build_client,
    configure_verbose_logging,
    load_settings,
    mist_to_sui,
    short_id,
)
from fate_pools.apps.pool_sync.errors import PoolNotFound, PoolSchemaError
from fate_pools.apps.pool_sync.fetcher import PoolStateFetcher
from fate_pools.apps.pool_sync.metrics import pool_metrics
from fate_pools.apps.pool_sync.models import ORACLE_PRICE_SCALE, PoolState
from fate_pools.apps.pool_sync.watcher import PoolWatcher
from fate_pools.clients.sui.exceptions import QueryError

_CHANGED = "*"


def watch(
    pool_id: str,
    address: Annotated[str, typer.Option(help="Also track this user's position")] = "",
    interval: Annotated[
        float, typer.Option(help="Seconds between polls (default from settings)")
    ] = 0.0,
    max_ticks: Annotated[int, typer.Option(help="Stop after N updates, 0 to run forever")] = 0,
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Enable polling logs")
    ] = False,
) -> None:
    """Poll POOL_ID and print its state whenever it is fetched.

    Args:
        pool_id: Object id of the pool to watch.
        address: Optional user address whose position is tracked too.
        interval: Polling interval override in seconds.
        max_ticks: Number of updates after which to stop.
        verbose: Enable polling logs.

    """
    if verbose:
        configure_verbose_logging()
    if interval < 0 or max_ticks < 0:
        typer.echo("Error: --interval and --max-ticks cannot be negative", err=True)
        raise typer.Exit(code=1)
    asyncio.run(
        _watch(pool_id=pool_id, address=address or None, interval=interval, max_ticks=max_ticks)
    )


def _mark(mask: ChangeMask, field: str) -> str:
    return _CHANGED if mask.get(field, False) else " "


def _print_update(state: PoolState, mask: ChangeMask) -> None:
    """Print one line summarising the pool, flagging changed fields."""
    snapshot = state.snapshot
    metrics = pool_metrics(state)
    price = snapshot.current_price / ORACLE_PRICE_SCALE
    line = (
        f"{snapshot.name}  price {price:.4f}{_mark(mask, 'current_price')} "
        f"bull {mist_to_sui(snapshot.bull_reserve):.4f}{_mark(mask, 'bull_reserve')} "
        f"@ {metrics.bull.price:.4f}{_mark(mask, 'bull_supply')} "
        f"bear {mist_to_sui(snapshot.bear_reserve):.4f}{_mark(mask, 'bear_reserve')} "
        f"@ {metrics.bear.price:.4f}{_mark(mask, 'bear_supply')}"
    )
    if state.position is not None:
        line += f"  value {metrics.total_value:.4f} pnl {metrics.total_pnl:+.4f}"
    typer.echo(line)


async def _watch(*, pool_id: str, address: str | None, interval: float, max_ticks: int) -> None:
    """Run the watcher until interrupted or ``max_ticks`` updates arrive.

    Args:
        pool_id: Object id of the pool to watch.
        address: Optional user address whose position is tracked too.
        interval: Polling interval override in seconds, ``0`` for the default.
        max_ticks: Number of updates after which to stop, ``0`` for none.

    """
    protocol, sync = load_settings()
    done = asyncio.Event()
    updates = 0

    def on_update(state: PoolState, mask: ChangeMask) -> None:
        nonlocal updates
        _print_update(state, mask)
        updates += 1
        if max_ticks and updates >= max_ticks:
            done.set()

    async with build_client(sync) as client:
        fetcher = PoolStateFetcher(client, protocol.package_id)
        try:
            initial = await fetcher.fetch(pool_id, address)
        except (PoolNotFound, PoolSchemaError, QueryError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        watcher = PoolWatcher(
            fetcher,
            pool_id,
            interval=interval or sync.polling_interval,
            user_address=address,
            on_update=on_update,
        )
        typer.echo(f"Watching {short_id(pool_id)} every {watcher.scheduler.interval:.1f}s")
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, done.set)
        watcher.start(initial)
        try:
            await done.wait()
        finally:
            loop.remove_signal_handler(signal.SIGINT)
            await watcher.stop()
            await watcher.scheduler.wait_idle()
    typer.echo(f"Stopped after {updates} updates")
