"""Layered YAML configuration for the Fate pool tools.

Settings are read from up to three files in the config directory, each
deep-merged over the previous one:

1. ``settings.yaml``: packaged defaults.
2. ``settings.<network>.yaml``: per-network overrides, where the network
   comes from ``FATE_NETWORK`` or the ``network`` key of the defaults.
3. ``settings.local.yaml``: untracked developer overrides.

String values may reference environment variables as ``${VAR}`` or
``${VAR:default}``, anywhere within the string.  A ``.env`` file in the
working directory is loaded first so those variables can live there.
"""

import os
import re
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv

_ENV_REF = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<default>[^}]*))?\}")
_DEFAULT_NETWORK = "testnet"


class ConfigError(Exception):
    """Raise when configuration loading or validation fails."""


def _merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _merge(cast("dict[str, Any]", current), cast("dict[str, Any]", value))
        else:
            base[key] = value


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open() as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            msg = f"Invalid YAML in {path.name}: {exc}"
            raise ConfigError(msg) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping at the top level"
        raise ConfigError(msg)
    return cast("dict[str, Any]", data)


def _expand_str(value: str) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group("name")
        resolved = os.getenv(name, match.group("default"))
        if resolved is None:
            msg = f"Environment variable {name} is referenced but not set and has no default"
            raise ConfigError(msg)
        return resolved

    return _ENV_REF.sub(replace, value)


def _expand(node: Any) -> Any:
    if isinstance(node, dict):
        return {key: _expand(item) for key, item in cast("dict[str, Any]", node).items()}
    if isinstance(node, list):
        return [_expand(item) for item in cast("list[Any]", node)]
    if isinstance(node, str):
        return _expand_str(node)
    return node


class ConfigLoader:
    """Resolve layered settings files into one nested mapping.

    Args:
        config_dir: Directory holding the settings files. Defaults to the
            ``config`` directory shipped inside the package.
        network: Network overlay to apply. Defaults to ``FATE_NETWORK``,
            then the ``network`` key of ``settings.yaml``, then testnet.

    """

    def __init__(self, config_dir: Path | None = None, network: str | None = None) -> None:
        """Load ``.env`` then read and merge the settings layers.

        Args:
            config_dir: Directory holding the settings files.
            network: Network overlay to apply.

        Raises:
            ConfigError: If a file is not valid YAML or an environment
                reference cannot be resolved.

        """
        load_dotenv()
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)
        merged = _read_yaml(self.config_dir / "settings.yaml")
        self.network = str(
            network or os.getenv("FATE_NETWORK") or merged.get("network") or _DEFAULT_NETWORK
        )
        _merge(merged, _read_yaml(self.config_dir / f"settings.{self.network}.yaml"))
        _merge(merged, _read_yaml(self.config_dir / "settings.local.yaml"))
        merged["network"] = self.network
        self._config: dict[str, Any] = _expand(merged)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a value by dot-separated path.

        Args:
            key: Path such as ``"protocol.package_id"``.
            default: Returned when any segment of the path is missing.

        Returns:
            The configured value or ``default``.

        """
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict):
                return default
            node = cast("dict[str, Any]", node).get(part)
            if node is None:
                return default
        return node

    def get_section(self, name: str) -> dict[str, Any]:
        """Return a section as a mapping, or an empty dict when it is absent.

        Raises:
            ConfigError: If the section exists but is not a mapping.

        """
        section: Any = self.get(name, {})
        if not isinstance(section, dict):
            msg = f"{name} config must be a dict, got {type(section).__name__}"
            raise ConfigError(msg)
        return cast("dict[str, Any]", section)

    def get_required(self, key: str) -> str:
        """Return a non-blank value as a string.

        Raises:
            ConfigError: If the key is missing or blank.

        """
        value = self.get(key)
        if value is None or not str(value).strip():
            msg = f"{key} is not configured"
            raise ConfigError(msg)
        return str(value)


_config: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Return the process-wide ``ConfigLoader``, building it on first use.

    Nothing is read at import time, so tests can point the environment at
    their own settings before the first call.

    Returns:
        The shared loader.

    """
    global _config  # noqa: PLW0603
    if _config is None:
        _config = ConfigLoader()
    return _config
