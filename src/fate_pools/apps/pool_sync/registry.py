"""Walk Fate's paginated registries to discover pool ids.

Both the global pool registry and the per-user registry expose a
"page N" view function returning ``(vector<address>, bool, u32, u64)``:
the ids on the page, a has-next-page flag, the total page count and the
total item count.  Pages are requested strictly one after another because
whether to ask for page N+1 depends on page N's answer.
"""

import logging
from collections.abc import Callable

from fate_pools.apps.pool_sync.errors import RegistryError
from fate_pools.apps.pool_sync.models import RegistryPage, RegistryScan, UserRegistryStats
from fate_pools.clients.sui._bcs import decode_bool, decode_u32, decode_u64, decode_vector
from fate_pools.clients.sui.exceptions import QueryError
from fate_pools.core.models import MoveCall, PureArg, move_target
from fate_pools.core.protocols import ReadOnlyQueryClient

logger = logging.getLogger(__name__)

_POOL_REGISTRY_MODULE = "pool_registry"
_USER_REGISTRY_MODULE = "user_registry"
_PAGE_RETURNS = 4
_STATS_RETURNS = 2


def decode_registry_page(page: int, values: list[bytes]) -> RegistryPage:
    """Decode the four return values of a registry page call.

    Args:
        page: Index of the page the values belong to.
        values: Raw return values in declaration order.

    Returns:
        The decoded page.

    Raises:
        DecodeError: If any value is shorter than its shape requires.

    """
    return RegistryPage(
        page=page,
        ids=tuple(decode_vector(values[0], "address")),
        has_next=decode_bool(values[1]),
        total_pages=decode_u32(values[2]),
        total_items=decode_u64(values[3]),
    )


class RegistryPaginator:
    """Accumulate every id listed by a paginated registry.

    Args:
        client: Read-only query client.
        package_id: Id of the Fate Move package.
        sender: Default simulation sender for registry-wide reads.

    """

    def __init__(self, client: ReadOnlyQueryClient, package_id: str, sender: str) -> None:
        """Initialize the paginator.

        Args:
            client: Read-only query client.
            package_id: Id of the Fate Move package.
            sender: Default simulation sender for registry-wide reads.

        """
        self._client = client
        self._package_id = package_id
        self._sender = sender

    async def collect_pool_ids(self, registry_id: str) -> RegistryScan:
        """Return every pool id in the global pool registry.

        Args:
            registry_id: Object id of the pool registry.

        Returns:
            Scan with the ids discovered before exhaustion or failure.

        """
        target = move_target(self._package_id, _POOL_REGISTRY_MODULE, "get_pools_from_page")

        def build(page: int) -> MoveCall:
            return MoveCall(
                target=target,
                objects=(registry_id,),
                pure=(PureArg.u32(page),),
                expected_returns=_PAGE_RETURNS,
            )

        return await self._walk(build, self._sender)

    async def collect_user_pool_ids(self, registry_id: str, user_address: str) -> RegistryScan:
        """Return every pool id the user registry lists for an address.

        Args:
            registry_id: Object id of the user registry.
            user_address: Address whose pools to list.

        Returns:
            Scan with the ids discovered before exhaustion or failure.

        """
        target = move_target(self._package_id, _USER_REGISTRY_MODULE, "get_user_pools_paginated")

        def build(page: int) -> MoveCall:
            return MoveCall(
                target=target,
                objects=(registry_id,),
                pure=(PureArg.address(user_address), PureArg.u32(page)),
                expected_returns=_PAGE_RETURNS,
            )

        return await self._walk(build, user_address)

    async def fetch_user_stats(self, registry_id: str, user_address: str) -> UserRegistryStats:
        """Return the user registry's counters for an address.

        Args:
            registry_id: Object id of the user registry.
            user_address: Address to look up.

        Returns:
            Stats; all zero when the address was never registered.

        Raises:
            QueryError: When either view call fails.

        """
        user_arg = (PureArg.address(user_address),)
        exists_values = await self._client.simulate_call(
            MoveCall(
                target=move_target(self._package_id, _USER_REGISTRY_MODULE, "user_exists"),
                objects=(registry_id,),
                pure=user_arg,
            ),
            user_address,
        )
        if not decode_bool(exists_values[0]):
            return UserRegistryStats(exists=False)

        stats_values = await self._client.simulate_call(
            MoveCall(
                target=move_target(self._package_id, _USER_REGISTRY_MODULE, "get_user_stats"),
                objects=(registry_id,),
                pure=user_arg,
                expected_returns=_STATS_RETURNS,
            ),
            user_address,
        )
        return UserRegistryStats(
            exists=True,
            total_pools=decode_u64(stats_values[0]),
            total_pages=decode_u32(stats_values[1]),
        )

    async def _walk(self, build_call: Callable[[int], MoveCall], sender: str) -> RegistryScan:
        """Request pages from 0 until the registry reports no more.

        Stop when either the has-next flag is false or the page index reaches
        the reported page count.  A failed page ends the walk and is returned
        as ``RegistryScan.error`` together with the ids gathered so far.

        Args:
            build_call: Builds the view call for a page index.
            sender: Simulation sender.

        Returns:
            The accumulated scan.

        """
        ids: list[str] = []
        total_items: int | None = None
        page = 0
        while True:
            try:
                values = await self._client.simulate_call(build_call(page), sender)
            except QueryError as exc:
                logger.warning("Registry page %d failed: %s", page, exc)
                return RegistryScan(
                    ids=tuple(ids),
                    pages_fetched=page,
                    total_items=total_items,
                    error=RegistryError(page, exc),
                )

            decoded = decode_registry_page(page, values)
            ids.extend(decoded.ids)
            total_items = decoded.total_items
            logger.debug(
                "Registry page %d: %d ids, has_next=%s, total_pages=%d, total_items=%d",
                page,
                len(decoded.ids),
                decoded.has_next,
                decoded.total_pages,
                decoded.total_items,
            )
            page += 1
            if not decoded.has_next or page >= decoded.total_pages:
                break

        logger.info("Registry walk complete: %d ids across %d pages", len(ids), page)
        return RegistryScan(ids=tuple(ids), pages_fetched=page, total_items=total_items)

