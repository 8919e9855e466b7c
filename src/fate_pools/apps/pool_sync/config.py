"""Configuration dataclasses for the pool synchronisation service.

Hold the static protocol addresses and the tuneable sync parameters.
Immutable after construction so that long-running watchers and loaders
cannot mutate them mid-session.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from fate_pools.core.config import ConfigError, ConfigLoader, get_config

_DEFAULT_POLLING_INTERVAL = 5.0
_DEFAULT_RPC_TIMEOUT = 30.0
_DEFAULT_RPC_URL = "https://fullnode.testnet.sui.io:443"


@dataclass(frozen=True)
class AssetInfo:
    """Display metadata for an oracle price pair.

    Attributes:
        name: Human-readable asset name (e.g. ``"Bitcoin"``).
        symbol: Ticker symbol (e.g. ``"BTC"``).

    """

    name: str
    symbol: str


UNKNOWN_ASSET = AssetInfo(name="Unknown", symbol="UNK")


@dataclass(frozen=True)
class ProtocolConfig:
    """Deployed Fate protocol addresses, treated as opaque constants.

    Attributes:
        package_id: Id of the published Move package.
        pool_registry: Shared object indexing every pool.
        user_registry: Shared object indexing each user's pools.
        inspect_sender: Address used as sender for registry-wide simulations.
        oracle_holder: Shared oracle holder object, when configured. No read
            path needs it.

    """

    package_id: str
    pool_registry: str
    user_registry: str
    inspect_sender: str
    oracle_holder: str | None = None


@dataclass(frozen=True)
class SyncConfig:
    """Tuneable parameters for RPC access and polling.

    Attributes:
        rpc_url: Sui full node JSON-RPC endpoint.
        rpc_timeout: Request timeout in seconds.
        polling_interval: Seconds between watcher re-fetches.
        assets: Price pair id to display metadata.

    """

    rpc_url: str = _DEFAULT_RPC_URL
    rpc_timeout: float = _DEFAULT_RPC_TIMEOUT
    polling_interval: float = _DEFAULT_POLLING_INTERVAL
    assets: dict[str, AssetInfo] = field(default_factory=dict)

    def asset_for(self, pair_id: str) -> AssetInfo:
        """Return display metadata for a price pair, or ``UNKNOWN_ASSET``."""
        return self.assets.get(pair_id, UNKNOWN_ASSET)


def _positive_float(value: object, key: str) -> float:
    try:
        number = Decimal(str(value))
    except InvalidOperation as exc:
        msg = f"{key} must be a number, got {value!r}"
        raise ConfigError(msg) from exc
    if number <= 0:
        msg = f"{key} must be positive, got {value!r}"
        raise ConfigError(msg)
    return float(number)


def load_protocol_config(loader: ConfigLoader | None = None) -> ProtocolConfig:
    """Build a ``ProtocolConfig`` from the ``protocol`` settings section.

    Args:
        loader: Config loader to read from. Defaults to the global loader.

    Returns:
        Protocol addresses.

    Raises:
        ConfigError: If a required address is missing. The oracle holder is
            optional.

    """
    loader = loader or get_config()
    oracle_holder = str(loader.get("protocol.oracle_holder", "")).strip()
    return ProtocolConfig(
        package_id=loader.get_required("protocol.package_id"),
        pool_registry=loader.get_required("protocol.pool_registry"),
        user_registry=loader.get_required("protocol.user_registry"),
        inspect_sender=loader.get_required("protocol.inspect_sender"),
        oracle_holder=oracle_holder or None,
    )


def load_sync_config(loader: ConfigLoader | None = None) -> SyncConfig:
    """Build a ``SyncConfig`` from the ``sui``, ``sync`` and ``assets`` sections.

    Args:
        loader: Config loader to read from. Defaults to the global loader.

    Returns:
        Sync parameters with defaults for anything not configured.

    Raises:
        ConfigError: If a numeric setting is not a positive number or an
            asset entry is malformed.

    """
    loader = loader or get_config()
    assets: dict[str, AssetInfo] = {}
    for pair_id, raw in loader.get_section("assets").items():
        if not isinstance(raw, dict) or "name" not in raw or "symbol" not in raw:
            msg = f"assets.{pair_id} must define name and symbol"
            raise ConfigError(msg)
        assets[str(pair_id)] = AssetInfo(name=str(raw["name"]), symbol=str(raw["symbol"]))

    return SyncConfig(
        rpc_url=str(loader.get("sui.rpc_url", _DEFAULT_RPC_URL)),
        rpc_timeout=_positive_float(loader.get("sui.timeout", _DEFAULT_RPC_TIMEOUT), "sui.timeout"),
        polling_interval=_positive_float(
            loader.get("sync.polling_interval_seconds", _DEFAULT_POLLING_INTERVAL),
            "sync.polling_interval_seconds",
        ),
        assets=assets,
    )
