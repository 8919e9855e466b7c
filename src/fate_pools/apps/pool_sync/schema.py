"""Strict conversion of raw pool object fields into ``PoolSnapshot``.

``sui_getObject`` returns an arbitrarily nested mapping where ``u64`` values
arrive as decimal strings and nested structs as ``{"type", "fields"}``
wrappers.  This module is the only place that reads that mapping: every
required field is validated here and converted once, so nothing untyped
flows further into the fetcher, loader or metrics.
"""

from collections.abc import Mapping
from typing import Any

from fate_pools.apps.pool_sync.errors import PoolSchemaError
from fate_pools.apps.pool_sync.models import FEE_DENOMINATOR, PoolSnapshot

_FEE_FIELDS = {
    "protocol_fee": "protocol_fee",
    "mint_fee": "mint_fee",
    "burn_fee": "burn_fee",
    "pool_creator_fee": "creator_fee",
}
_OPTIONAL_FEES = frozenset({"mint_fee", "burn_fee"})


def _to_uint(pool_id: str, field: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise PoolSchemaError(pool_id, field, "expected an unsigned integer, got bool")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdecimal():
        value = int(raw)
    else:
        raise PoolSchemaError(pool_id, field, f"expected an unsigned integer, got {raw!r}")
    if value < 0:
        raise PoolSchemaError(pool_id, field, "must be non-negative")
    return value


def _required_uint(pool_id: str, fields: Mapping[str, Any], field: str) -> int:
    if fields.get(field) is None:
        raise PoolSchemaError(pool_id, field, "missing")
    return _to_uint(pool_id, field, fields[field])


def _optional_uint(pool_id: str, fields: Mapping[str, Any], field: str) -> int:
    raw = fields.get(field)
    return 0 if raw is None else _to_uint(pool_id, field, raw)


def _token_supply(pool_id: str, fields: Mapping[str, Any], token: str) -> int:
    wrapper = fields.get(token)
    inner = wrapper.get("fields") if isinstance(wrapper, Mapping) else None
    if not isinstance(inner, Mapping):
        raise PoolSchemaError(pool_id, token, "missing token struct")
    return _required_uint(pool_id, inner, "total_supply")


def _text(fields: Mapping[str, Any], field: str) -> str:
    raw = fields.get(field)
    return raw if isinstance(raw, str) else ""


def _pair_id(fields: Mapping[str, Any]) -> str:
    """Render the price pair id, which may be a string, number, or byte list."""
    for key in ("pair_id", "asset_id"):
        raw = fields.get(key)
        if isinstance(raw, str) and raw:
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            return str(raw)
        if isinstance(raw, list) and raw:
            return "0x" + bytes(raw).hex()
    return ""


def parse_pool_fields(pool_id: str, fields: Mapping[str, Any]) -> PoolSnapshot:
    """Validate raw pool fields and build a ``PoolSnapshot``.

    Args:
        pool_id: Object id the fields were read from.
        fields: ``content.fields`` of the pool object.

    Returns:
        The decoded snapshot.

    Raises:
        PoolSchemaError: If a required field is missing, a numeric field is
            malformed or negative, or a fee rate exceeds the denominator.

    """
    name = fields.get("name")
    if not isinstance(name, str):
        raise PoolSchemaError(pool_id, "name", "missing")

    fees: dict[str, int] = {}
    for raw_name, attr in _FEE_FIELDS.items():
        if raw_name in _OPTIONAL_FEES:
            value = _optional_uint(pool_id, fields, raw_name)
        else:
            value = _required_uint(pool_id, fields, raw_name)
        if value > FEE_DENOMINATOR:
            raise PoolSchemaError(pool_id, raw_name, f"exceeds {FEE_DENOMINATOR} bps")
        fees[attr] = value

    return PoolSnapshot(
        pool_id=pool_id,
        name=name,
        description=_text(fields, "description"),
        pair_id=_pair_id(fields),
        creator=_text(fields, "pool_creator"),
        current_price=_optional_uint(pool_id, fields, "current_price"),
        bull_reserve=_required_uint(pool_id, fields, "bull_reserve"),
        bear_reserve=_required_uint(pool_id, fields, "bear_reserve"),
        bull_supply=_token_supply(pool_id, fields, "bull_token"),
        bear_supply=_token_supply(pool_id, fields, "bear_token"),
        **fees,
    )
