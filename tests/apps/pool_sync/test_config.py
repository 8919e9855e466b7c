"""Tests for the pool sync configuration dataclasses and loaders."""

from pathlib import Path

import pytest

from fate_pools.apps.pool_sync.config import (
    UNKNOWN_ASSET,
    load_protocol_config,
    load_sync_config,
)
from fate_pools.core.config import ConfigError, ConfigLoader

_PACKAGE = "0x" + "11" * 32
_POOL_REGISTRY = "0x" + "22" * 32
_USER_REGISTRY = "0x" + "23" * 32
_ORACLE = "0x" + "24" * 32
_SENDER = "0x" + "00" * 32
_POLLING_INTERVAL = 2.5

_PROTOCOL_WITHOUT_ORACLE = f"""
protocol:
  package_id: "{_PACKAGE}"
  pool_registry: "{_POOL_REGISTRY}"
  user_registry: "{_USER_REGISTRY}"
  inspect_sender: "{_SENDER}"
"""


def _loader(tmp_path: Path, text: str) -> ConfigLoader:
    (tmp_path / "settings.yaml").write_text(text)
    return ConfigLoader(config_dir=tmp_path, network="testnet")


class TestLoadProtocolConfig:
    """Tests for load_protocol_config."""

    def test_oracle_holder_is_optional(self, tmp_path: Path) -> None:
        """Test read-only commands load without an oracle holder id."""
        protocol = load_protocol_config(_loader(tmp_path, _PROTOCOL_WITHOUT_ORACLE))

        assert protocol.package_id == _PACKAGE
        assert protocol.pool_registry == _POOL_REGISTRY
        assert protocol.user_registry == _USER_REGISTRY
        assert protocol.inspect_sender == _SENDER
        assert protocol.oracle_holder is None

    def test_blank_oracle_holder_is_none(self, tmp_path: Path) -> None:
        """Test an empty oracle holder value is treated as absent."""
        text = _PROTOCOL_WITHOUT_ORACLE + '  oracle_holder: ""\n'

        protocol = load_protocol_config(_loader(tmp_path, text))

        assert protocol.oracle_holder is None

    def test_oracle_holder_kept_when_configured(self, tmp_path: Path) -> None:
        """Test a configured oracle holder id is carried through."""
        text = _PROTOCOL_WITHOUT_ORACLE + f'  oracle_holder: "{_ORACLE}"\n'

        protocol = load_protocol_config(_loader(tmp_path, text))

        assert protocol.oracle_holder == _ORACLE

    def test_missing_registry_is_an_error(self, tmp_path: Path) -> None:
        """Test the addresses every read path needs are still required."""
        text = _PROTOCOL_WITHOUT_ORACLE.replace(f'  user_registry: "{_USER_REGISTRY}"\n', "")

        with pytest.raises(ConfigError, match="protocol.user_registry"):
            load_protocol_config(_loader(tmp_path, text))

    def test_packaged_defaults_load(self) -> None:
        """Test the shipped settings provide every protocol address."""
        protocol = load_protocol_config(ConfigLoader(network="testnet"))

        assert protocol.package_id.startswith("0x")
        assert protocol.oracle_holder is not None


class TestLoadSyncConfig:
    """Tests for load_sync_config."""

    def test_defaults_when_unconfigured(self, tmp_path: Path) -> None:
        """Test an empty settings file yields the built-in defaults."""
        sync = load_sync_config(_loader(tmp_path, "network: testnet\n"))

        assert sync.rpc_url.startswith("https://")
        assert sync.assets == {}
        assert sync.asset_for("0") is UNKNOWN_ASSET

    def test_reads_interval_and_assets(self, tmp_path: Path) -> None:
        """Test polling interval and asset table are read from settings."""
        text = f"""
sync:
  polling_interval_seconds: {_POLLING_INTERVAL}
assets:
  "0":
    name: Bitcoin
    symbol: BTC
"""
        sync = load_sync_config(_loader(tmp_path, text))

        assert sync.polling_interval == _POLLING_INTERVAL
        assert sync.asset_for("0").symbol == "BTC"

    def test_non_positive_interval(self, tmp_path: Path) -> None:
        """Test a zero polling interval is rejected."""
        text = "sync:\n  polling_interval_seconds: 0\n"

        with pytest.raises(ConfigError, match="must be positive"):
            load_sync_config(_loader(tmp_path, text))
