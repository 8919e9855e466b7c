"""CLI command for exploring every registered prediction pool.

Walk the global pool registry, load all pools concurrently and print a
liquidity and fee overview, optionally filtered.
"""

import asyncio
from typing import Annotated

import typer

from fate_pools.apps.pool_sync.cli._helpers import (
    build_client,
    configure_verbose_logging,
    load_settings,
    mist_to_sui,
    short_id,
    sui_to_mist,
)
from fate_pools.apps.pool_sync.explore import PoolFilter, filter_pools
from fate_pools.apps.pool_sync.fetcher import PoolStateFetcher
from fate_pools.apps.pool_sync.loader import ConcurrentPoolLoader
from fate_pools.apps.pool_sync.metrics import pool_overview
from fate_pools.apps.pool_sync.registry import RegistryPaginator
from fate_pools.clients.sui.exceptions import DecodeError

_MAX_NAME_LEN = 28


def pools(  # noqa: PLR0913
    search: Annotated[
        str, typer.Option(help="Text to match in name, description, creator or asset")
    ] = "",
    asset: Annotated[str, typer.Option(help="Only pools on this price pair id")] = "",
    creator: Annotated[str, typer.Option(help="Creator address substring")] = "",
    min_liquidity: Annotated[float, typer.Option(help="Minimum liquidity in SUI")] = 0.0,
    max_liquidity: Annotated[
        float, typer.Option(help="Maximum liquidity in SUI, 0 for none")
    ] = 0.0,
    min_fees: Annotated[int, typer.Option(help="Minimum total fee in bps")] = 0,
    max_fees: Annotated[int, typer.Option(help="Maximum total fee in bps, 0 for none")] = 0,
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Enable fetch logging")
    ] = False,
) -> None:
    """List registered prediction pools with liquidity and fees."""
    if verbose:
        configure_verbose_logging()
    try:
        pool_filter = PoolFilter(
            search=search,
            pair_id=asset,
            creator=creator,
            min_liquidity=sui_to_mist(min_liquidity),
            max_liquidity=sui_to_mist(max_liquidity),
            min_fee_bps=min_fees,
            max_fee_bps=max_fees,
        )
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    asyncio.run(_pools(pool_filter=pool_filter))


async def _pools(*, pool_filter: PoolFilter) -> None:
    """Discover, load and display pools matching ``pool_filter``.

    Args:
        pool_filter: Criteria applied to every loaded pool.

    """
    protocol, sync = load_settings()
    async with build_client(sync) as client:
        paginator = RegistryPaginator(client, protocol.package_id, protocol.inspect_sender)
        try:
            scan = await paginator.collect_pool_ids(protocol.pool_registry)
        except DecodeError as exc:
            typer.echo(f"Error: unexpected registry response: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        if scan.error is not None and not scan.ids:
            typer.echo(f"Error: {scan.error}", err=True)
            raise typer.Exit(code=1)
        if scan.confirmed_empty:
            typer.echo("No pools registered yet")
            return

        loader = ConcurrentPoolLoader(PoolStateFetcher(client, protocol.package_id))
        session = await loader.load(scan.ids)

    if scan.error is not None:
        typer.echo(f"Warning: registry listing incomplete: {scan.error}", err=True)
    for pool_id, failure in session.failures.items():
        typer.echo(f"Warning: skipped {short_id(pool_id)}: {failure}", err=True)

    overviews = [
        pool_overview(state.snapshot, sync.asset_for(state.snapshot.pair_id).name)
        for state in session.results.values()
    ]
    matches = filter_pools(overviews, pool_filter)
    if not matches:
        typer.echo("No pools match the given filters")
        return

    typer.echo(
        f"\n{'Pool':<14} {'Name':<30} {'Asset':<10} {'Liquidity':>14} "
        f"{'Bull %':>7} {'Bear %':>7} {'Fees':>6}"
    )
    typer.echo("-" * 94)
    for overview in sorted(matches, key=lambda o: o.total_liquidity, reverse=True):
        name = overview.name[:_MAX_NAME_LEN]
        typer.echo(
            f"{short_id(overview.pool_id):<14} {name:<30} {overview.asset_name:<10} "
            f"{mist_to_sui(overview.total_liquidity):>14.4f} "
            f"{overview.bull_pct:>7.2f} {overview.bear_pct:>7.2f} {overview.total_fee_bps:>6}"
        )
    typer.echo(f"\n{len(matches)} of {scan.total_items or len(scan.ids)} pools shown")
