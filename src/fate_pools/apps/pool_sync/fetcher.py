"""Fetch one pool's on-chain state and, optionally, a user's position in it.

The pool object is read first; only once it is known to exist are the two
user-data view calls issued, concurrently.  A missing position is not an
error, so failures of those calls degrade to zero values.
"""

import asyncio
import logging
from decimal import Decimal

from fate_pools.apps.pool_sync.errors import PoolNotFound
from fate_pools.apps.pool_sync.models import PRICE_SCALE, PoolState, UserPosition
from fate_pools.apps.pool_sync.schema import parse_pool_fields
from fate_pools.clients.sui._bcs import decode_u64
from fate_pools.clients.sui.exceptions import DecodeError, QueryError, QueryErrorKind
from fate_pools.core.models import MoveCall, PureArg, move_target
from fate_pools.core.protocols import ReadOnlyQueryClient

logger = logging.getLogger(__name__)

_POOL_MODULE = "prediction_pool"
_PAIR_RETURNS = 2


class PoolStateFetcher:
    """Read a pool snapshot plus the requesting user's position.

    Args:
        client: Read-only query client.
        package_id: Id of the Fate Move package.

    """

    def __init__(self, client: ReadOnlyQueryClient, package_id: str) -> None:
        """Initialize the fetcher.

        Args:
            client: Read-only query client.
            package_id: Id of the Fate Move package.

        """
        self._client = client
        self._package_id = package_id

    async def fetch(self, pool_id: str, user_address: str | None = None) -> PoolState:
        """Fetch the current state of a pool.

        Args:
            pool_id: Object id of the pool.
            user_address: Address whose balances to read, if any.

        Returns:
            The pool snapshot and, when ``user_address`` is given, the
            user's position (zeroed if the user-data calls fail).

        Raises:
            PoolNotFound: If the pool object does not exist.
            QueryError: If the pool object read fails for another reason.
            PoolSchemaError: If the pool fields do not match the schema.

        """
        try:
            fields = await self._client.read_object_fields(pool_id)
        except QueryError as exc:
            if exc.kind is QueryErrorKind.NOT_FOUND:
                raise PoolNotFound(pool_id) from exc
            raise
        snapshot = parse_pool_fields(pool_id, fields)

        if user_address is None:
            return PoolState(snapshot=snapshot)

        (bull_balance, bear_balance), (bull_avg, bear_avg) = await asyncio.gather(
            self._read_pair(pool_id, user_address, "get_user_balances"),
            self._read_pair(pool_id, user_address, "get_user_avg_prices"),
        )
        position = UserPosition(
            pool_id=pool_id,
            user_address=user_address,
            bull_balance=bull_balance,
            bear_balance=bear_balance,
            bull_avg_price=Decimal(bull_avg) / PRICE_SCALE,
            bear_avg_price=Decimal(bear_avg) / PRICE_SCALE,
        )
        return PoolState(snapshot=snapshot, position=position)

    async def _read_pair(self, pool_id: str, user_address: str, function: str) -> tuple[int, int]:
        """Call a ``(u64, u64)`` view function, returning zeros on failure."""
        call = MoveCall(
            target=move_target(self._package_id, _POOL_MODULE, function),
            objects=(pool_id,),
            pure=(PureArg.address(user_address),),
            expected_returns=_PAIR_RETURNS,
        )
        try:
            values = await self._client.simulate_call(call, user_address)
            first, second = decode_u64(values[0]), decode_u64(values[1])
        except (QueryError, DecodeError) as exc:
            logger.warning("%s failed for pool %s, using zeros: %s", function, pool_id, exc)
            return 0, 0
        return first, second
