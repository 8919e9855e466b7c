"""Shared helpers for the pool sync CLI commands.

Centralise logging setup, configuration loading, client construction and
SUI amount formatting so each command module only holds its own flow.
"""

import logging
from decimal import Decimal

import typer

from fate_pools.apps.pool_sync.config import (
    ProtocolConfig,
    SyncConfig,
    load_protocol_config,
    load_sync_config,
)
from fate_pools.apps.pool_sync.models import MIST_PER_SUI
from fate_pools.clients.sui.client import SuiClient
from fate_pools.core.config import ConfigError

SHORT_ID_LEN = 10


def configure_verbose_logging() -> None:
    """Enable INFO-level logging for fetch and polling output."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings() -> tuple[ProtocolConfig, SyncConfig]:
    """Load protocol addresses and sync parameters, aborting on bad config.

    Returns:
        Protocol and sync configuration.

    """
    try:
        return load_protocol_config(), load_sync_config()
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def build_client(sync_config: SyncConfig) -> SuiClient:
    """Build a ``SuiClient`` for the configured full node."""
    return SuiClient(rpc_url=sync_config.rpc_url, timeout=sync_config.rpc_timeout)


def mist_to_sui(amount: int) -> Decimal:
    """Convert an integer MIST amount to SUI."""
    return Decimal(amount) / MIST_PER_SUI


def sui_to_mist(amount: float) -> int:
    """Convert a SUI amount entered on the command line to MIST."""
    return int(Decimal(str(amount)) * MIST_PER_SUI)


def short_id(object_id: str) -> str:
    """Abbreviate a 0x object id for tabular output."""
    if len(object_id) <= SHORT_ID_LEN:
        return object_id
    return f"{object_id[:SHORT_ID_LEN]}..."
