"""Search and filter pool overviews for the pool explorer.

Maximum bounds of ``0`` mean "unbounded".  Liquidity bounds are in MIST and
fee bounds in basis points, matching ``PoolOverview``.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from fate_pools.apps.pool_sync.models import PoolOverview


@dataclass(frozen=True)
class PoolFilter:
    """Criteria a pool overview must satisfy to be listed.

    Attributes:
        search: Case-insensitive text matched against name, description,
            creator and asset name.
        pair_id: Exact price pair id, or empty for any.
        creator: Case-insensitive creator address substring.
        min_liquidity: Minimum total liquidity in MIST.
        max_liquidity: Maximum total liquidity in MIST, ``0`` for none.
        min_fee_bps: Minimum total fee in basis points.
        max_fee_bps: Maximum total fee in basis points, ``0`` for none.

    """

    search: str = ""
    pair_id: str = ""
    creator: str = ""
    min_liquidity: int = 0
    max_liquidity: int = 0
    min_fee_bps: int = 0
    max_fee_bps: int = 0

    def __post_init__(self) -> None:
        """Reject negative bounds and inverted ranges."""
        for name in ("min_liquidity", "max_liquidity", "min_fee_bps", "max_fee_bps"):
            if getattr(self, name) < 0:
                msg = f"{name} cannot be negative"
                raise ValueError(msg)
        if self.max_liquidity and self.max_liquidity < self.min_liquidity:
            msg = "max_liquidity must not be below min_liquidity"
            raise ValueError(msg)
        if self.max_fee_bps and self.max_fee_bps < self.min_fee_bps:
            msg = "max_fee_bps must not be below min_fee_bps"
            raise ValueError(msg)

    def matches(self, overview: PoolOverview) -> bool:
        """Return True when ``overview`` satisfies every criterion."""
        if self.search:
            needle = self.search.lower()
            haystacks = (
                overview.name,
                overview.description,
                overview.creator,
                overview.asset_name,
            )
            if not any(needle in text.lower() for text in haystacks):
                return False
        if self.pair_id and overview.pair_id != self.pair_id:
            return False
        if self.creator and self.creator.lower() not in overview.creator.lower():
            return False
        if overview.total_liquidity < self.min_liquidity:
            return False
        if self.max_liquidity and overview.total_liquidity > self.max_liquidity:
            return False
        if overview.total_fee_bps < self.min_fee_bps:
            return False
        return not (self.max_fee_bps and overview.total_fee_bps > self.max_fee_bps)


def filter_pools(overviews: Iterable[PoolOverview], pool_filter: PoolFilter) -> list[PoolOverview]:
    """Return the overviews matching ``pool_filter``, preserving order."""
    return [overview for overview in overviews if pool_filter.matches(overview)]
