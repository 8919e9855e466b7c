"""CLI command for summarising a user's positions across pools.

Look the address up in the user registry, load each listed pool together
with the user's balances, and print per-pool and total P&L.  The output
keeps "nothing to show" distinct from "could not load".
"""

import asyncio
from typing import Annotated

import typer

from fate_pools.apps.pool_sync.cli._helpers import (
    build_client,
    configure_verbose_logging,
    load_settings,
    short_id,
)
from fate_pools.apps.pool_sync.fetcher import PoolStateFetcher
from fate_pools.apps.pool_sync.loader import ConcurrentPoolLoader, PoolLoadSession
from fate_pools.apps.pool_sync.metrics import summarize_portfolio
from fate_pools.apps.pool_sync.models import PortfolioSummary
from fate_pools.apps.pool_sync.registry import RegistryPaginator
from fate_pools.clients.sui.exceptions import DecodeError, QueryError

_MAX_NAME_LEN = 24


def portfolio(
    address: str,
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Enable fetch logging and load progress")
    ] = False,
) -> None:
    """Show the positions and P&L held by ADDRESS.

    Args:
        address: Sui address of the user.
        verbose: Enable fetch logging and load progress.

    """
    if verbose:
        configure_verbose_logging()
    asyncio.run(_portfolio(address=address, verbose=verbose))


def _report_progress(session: PoolLoadSession) -> None:
    typer.echo(f"  loaded {session.loaded}/{session.expected} pools", err=True)


async def _portfolio(*, address: str, verbose: bool) -> None:
    """Load and display the portfolio for ``address``.

    Args:
        address: Sui address of the user.
        verbose: Print progress after every pool settles.

    """
    protocol, sync = load_settings()
    async with build_client(sync) as client:
        paginator = RegistryPaginator(client, protocol.package_id, protocol.inspect_sender)
        try:
            stats = await paginator.fetch_user_stats(protocol.user_registry, address)
            if not stats.exists:
                typer.echo(f"No Fate activity for {address}")
                return
            scan = await paginator.collect_user_pool_ids(protocol.user_registry, address)
        except (QueryError, DecodeError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        if scan.error is not None and not scan.ids:
            typer.echo(f"Error: {scan.error}", err=True)
            raise typer.Exit(code=1)
        if scan.confirmed_empty:
            typer.echo(f"No pools found for {address}")
            return

        typer.echo(f"Loading {len(scan.ids)} pools for {short_id(address)}...")
        loader = ConcurrentPoolLoader(PoolStateFetcher(client, protocol.package_id))
        session = await loader.load(
            scan.ids,
            user_address=address,
            on_update=_report_progress if verbose else None,
        )

    if scan.error is not None:
        typer.echo(f"Warning: pool listing incomplete: {scan.error}", err=True)
    for pool_id, failure in session.failures.items():
        typer.echo(f"Warning: skipped {short_id(pool_id)}: {failure}", err=True)

    summary = summarize_portfolio(session.results.values())
    if not summary.positions:
        typer.echo("No open positions")
        return
    _print_summary(summary)


def _print_summary(summary: PortfolioSummary) -> None:
    """Print one row per position followed by portfolio totals."""
    typer.echo(
        f"\n{'Pool':<26} {'Side':<5} {'Tokens':>12} {'Price':>10} "
        f"{'Value':>12} {'Cost':>12} {'P&L':>12} {'Return':>9}"
    )
    typer.echo("-" * 104)
    for metrics in summary.positions:
        name = metrics.name[:_MAX_NAME_LEN]
        for label, side in (("BULL", metrics.bull), ("BEAR", metrics.bear)):
            if side.balance == 0:
                continue
            typer.echo(
                f"{name:<26} {label:<5} {side.balance:>12.4f} {side.price:>10.4f} "
                f"{side.value:>12.4f} {side.cost_basis:>12.4f} {side.pnl:>12.4f} "
                f"{side.return_pct:>8.2f}%"
            )

    typer.echo("-" * 104)
    typer.echo(
        f"Active pools: {summary.active_count}  "
        f"(bull {len(summary.bull_positions)}, bear {len(summary.bear_positions)})"
    )
    typer.echo(f"Total value:  {summary.total_value:.4f} SUI")
    typer.echo(f"Cost basis:   {summary.total_cost_basis:.4f} SUI")
    typer.echo(f"P&L:          {summary.total_pnl:+.4f} SUI ({summary.total_return_pct:+.2f}%)")
