"""In-memory stand-ins for the Sui query client and raw pool fields."""

from collections.abc import Callable
from typing import Any

from fate_pools.clients.sui.exceptions import QueryError, QueryErrorKind
from fate_pools.core.models import MoveCall

CallHandler = Callable[[MoveCall, str], list[bytes]]


class FakeQueryClient:
    """In-memory ``ReadOnlyQueryClient`` keyed by object id and function name.

    ``objects`` maps object ids to field dicts or to an exception to raise.
    ``calls`` maps Move function names to a list of return values, an
    exception, or a handler ``(call, sender) -> values``.  Every simulated
    call is recorded in ``simulated`` for assertions.
    """

    def __init__(self) -> None:
        """Start with no objects and no view functions."""
        self.objects: dict[str, dict[str, Any] | Exception] = {}
        self.calls: dict[str, list[bytes] | Exception | CallHandler] = {}
        self.simulated: list[tuple[MoveCall, str]] = []
        self.reads: list[str] = []

    async def simulate_call(self, call: MoveCall, sender: str) -> list[bytes]:
        """Return the configured values for ``call.function``."""
        self.simulated.append((call, sender))
        response = self.calls.get(call.function)
        if response is None:
            raise QueryError(msg=f"no fake for {call.function}", kind=QueryErrorKind.EXECUTION)
        if isinstance(response, Exception):
            raise response
        values = response(call, sender) if callable(response) else response
        if len(values) < call.expected_returns:
            raise QueryError(
                msg=f"{call.target} returned {len(values)} values",
                kind=QueryErrorKind.MISSING_RESULT,
            )
        return values

    async def read_object_fields(self, object_id: str) -> dict[str, Any]:
        """Return the configured fields for ``object_id``."""
        self.reads.append(object_id)
        response = self.objects.get(object_id)
        if response is None:
            raise QueryError(msg=f"Object {object_id} missing", kind=QueryErrorKind.NOT_FOUND)
        if isinstance(response, Exception):
            raise response
        return response


def pool_fields(  # noqa: PLR0913
    *,
    name: str = "BTC above 100k",
    bull_reserve: int | str = "1000000000",
    bear_reserve: int | str = "500000000",
    bull_supply: int | str = "500000000",
    bear_supply: int | str = "500000000",
    current_price: int | str = "1000000000",
    protocol_fee: int | str = "50",
    creator_fee: int | str = "100",
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw pool field map shaped like ``sui_getObject`` content."""
    fields: dict[str, Any] = {
        "name": name,
        "description": "Resolves against the BTC oracle",
        "pair_id": "0",
        "pool_creator": "0x" + "ab" * 32,
        "current_price": current_price,
        "bull_reserve": bull_reserve,
        "bear_reserve": bear_reserve,
        "bull_token": {"type": "fate::token::BullToken", "fields": {"total_supply": bull_supply}},
        "bear_token": {"type": "fate::token::BearToken", "fields": {"total_supply": bear_supply}},
        "protocol_fee": protocol_fee,
        "mint_fee": "25",
        "burn_fee": "25",
        "pool_creator_fee": creator_fee,
    }
    fields.update(extra)
    return fields
