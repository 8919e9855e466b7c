"""Read-only Sui JSON-RPC client for Fate prediction pools."""

from fate_pools.clients.sui.client import SuiClient
from fate_pools.clients.sui.exceptions import (
    DecodeError,
    QueryError,
    QueryErrorKind,
    SuiError,
)
from fate_pools.core.models import MoveCall, PureArg, move_target

__all__ = [
    "DecodeError",
    "MoveCall",
    "PureArg",
    "QueryError",
    "QueryErrorKind",
    "SuiClient",
    "SuiError",
    "move_target",
]
