"""CLI subpackage for the Fate pool sync app.

Create the Typer application and register all command modules.
"""

import typer

from fate_pools.apps.pool_sync.cli.pools_cmd import pools
from fate_pools.apps.pool_sync.cli.portfolio_cmd import portfolio
from fate_pools.apps.pool_sync.cli.watch_cmd import watch

app = typer.Typer(help="Read-only tools for Fate prediction pools on Sui")

app.command()(pools)
app.command()(portfolio)
app.command()(watch)

__all__ = ["app"]
