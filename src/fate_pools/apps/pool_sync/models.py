"""Typed records for decoded pool state and derived analytics.

Every record is a frozen dataclass: a fetch builds fresh snapshots and a
later fetch supersedes them, nothing is mutated in place.  On-chain
quantities stay as integer MIST (``1 SUI = 1e9 MIST``); derived analytics
use ``Decimal`` for precision.
"""

from dataclasses import dataclass
from decimal import Decimal

from fate_pools.apps.pool_sync.errors import RegistryError

ZERO = Decimal(0)
HUNDRED = Decimal(100)
MIST_PER_SUI = Decimal(1_000_000_000)
PRICE_SCALE = Decimal(1_000_000_000)
FEE_DENOMINATOR = 10_000
ORACLE_PRICE_SCALE = Decimal(10_000)


@dataclass(frozen=True)
class PoolSnapshot:
    """Immutable view of one prediction pool's on-chain fields.

    Args:
        pool_id: Object id of the pool.
        name: Display name.
        description: Free-text description.
        pair_id: Oracle price-pair identifier.
        creator: Address of the pool creator.
        current_price: Last oracle price recorded by the pool (scaled 1e4).
        bull_reserve: SUI backing the bull side, in MIST.
        bear_reserve: SUI backing the bear side, in MIST.
        bull_supply: Minted bull tokens, smallest unit.
        bear_supply: Minted bear tokens, smallest unit.
        protocol_fee: Protocol fee in basis points.
        mint_fee: Mint fee in basis points.
        burn_fee: Burn fee in basis points.
        creator_fee: Pool creator fee in basis points.

    """

    pool_id: str
    name: str
    description: str
    pair_id: str
    creator: str
    current_price: int
    bull_reserve: int
    bear_reserve: int
    bull_supply: int
    bear_supply: int
    protocol_fee: int
    mint_fee: int
    burn_fee: int
    creator_fee: int

    def __post_init__(self) -> None:
        """Reject negative quantities and out-of-range fee rates."""
        for name in ("current_price", "bull_reserve", "bear_reserve", "bull_supply", "bear_supply"):
            if getattr(self, name) < 0:
                msg = f"{name} must be non-negative"
                raise ValueError(msg)
        for name in ("protocol_fee", "mint_fee", "burn_fee", "creator_fee"):
            if not 0 <= getattr(self, name) <= FEE_DENOMINATOR:
                msg = f"{name} must be between 0 and {FEE_DENOMINATOR} bps"
                raise ValueError(msg)

    @property
    def total_liquidity(self) -> int:
        """Return combined bull and bear reserves in MIST."""
        return self.bull_reserve + self.bear_reserve

    @property
    def total_fee_bps(self) -> int:
        """Return the sum of all four fee rates in basis points."""
        return self.protocol_fee + self.mint_fee + self.burn_fee + self.creator_fee

    def tracked_fields(self) -> dict[str, int]:
        """Return the numeric fields watched for changes between ticks."""
        return {
            "current_price": self.current_price,
            "bull_reserve": self.bull_reserve,
            "bear_reserve": self.bear_reserve,
            "bull_supply": self.bull_supply,
            "bear_supply": self.bear_supply,
        }


@dataclass(frozen=True)
class UserPosition:
    """A user's token balances and average entry prices in one pool.

    Args:
        pool_id: Object id of the pool.
        user_address: Owner of the position.
        bull_balance: Bull tokens held, smallest unit.
        bear_balance: Bear tokens held, smallest unit.
        bull_avg_price: Average bull entry price in SUI per token.
        bear_avg_price: Average bear entry price in SUI per token.

    """

    pool_id: str
    user_address: str
    bull_balance: int = 0
    bear_balance: int = 0
    bull_avg_price: Decimal = ZERO
    bear_avg_price: Decimal = ZERO

    @property
    def has_position(self) -> bool:
        """Return True when the user holds tokens on either side."""
        return self.bull_balance > 0 or self.bear_balance > 0


@dataclass(frozen=True)
class PoolState:
    """A pool snapshot together with the requesting user's position.

    Args:
        snapshot: Pool fields at fetch time.
        position: The user's position, or ``None`` when no user was given.

    """

    snapshot: PoolSnapshot
    position: UserPosition | None = None

    @property
    def pool_id(self) -> str:
        """Return the pool's object id."""
        return self.snapshot.pool_id


@dataclass(frozen=True)
class RegistryPage:
    """One decoded page of a paginated registry.

    Args:
        page: Zero-based page index.
        ids: Object ids listed on this page.
        has_next: Registry-reported flag for a further page.
        total_pages: Registry-reported page count.
        total_items: Registry-reported item count.

    """

    page: int
    ids: tuple[str, ...]
    has_next: bool
    total_pages: int
    total_items: int


@dataclass(frozen=True)
class RegistryScan:
    """Outcome of walking a registry until exhaustion or failure.

    Args:
        ids: Ids accumulated in page order.
        pages_fetched: Number of pages successfully decoded.
        total_items: Item count reported by the last page, if any.
        error: Failure that stopped the walk early, if any.

    """

    ids: tuple[str, ...]
    pages_fetched: int
    total_items: int | None = None
    error: RegistryError | None = None

    @property
    def complete(self) -> bool:
        """Return True when the walk ended without a failure."""
        return self.error is None

    @property
    def confirmed_empty(self) -> bool:
        """Return True when the registry was fully walked and lists nothing."""
        return self.complete and not self.ids


@dataclass(frozen=True)
class UserRegistryStats:
    """Summary counters the user registry keeps for one address.

    Args:
        exists: Whether the address has ever been registered.
        total_pools: Number of pools the user has interacted with.
        total_pages: Number of registry pages listing those pools.

    """

    exists: bool
    total_pools: int = 0
    total_pages: int = 0


@dataclass(frozen=True)
class SideMetrics:
    """Price and P&L figures for one side (bull or bear) of a position.

    Args:
        price: Token price in SUI (reserve / supply).
        balance: Tokens held, in whole units.
        avg_price: Average entry price in SUI.
        value: Current value in SUI.
        cost_basis: Amount paid in SUI.
        pnl: Unrealised profit or loss in SUI.
        return_pct: P&L as a percentage of cost basis.

    """

    price: Decimal
    balance: Decimal
    avg_price: Decimal
    value: Decimal
    cost_basis: Decimal
    pnl: Decimal
    return_pct: Decimal


@dataclass(frozen=True)
class PoolMetrics:
    """Derived analytics for one pool position.

    Args:
        pool_id: Object id of the pool.
        name: Pool display name.
        bull: Bull side metrics.
        bear: Bear side metrics.

    """

    pool_id: str
    name: str
    bull: SideMetrics
    bear: SideMetrics

    @property
    def total_value(self) -> Decimal:
        """Return combined current value of both sides."""
        return self.bull.value + self.bear.value

    @property
    def total_cost_basis(self) -> Decimal:
        """Return combined cost basis of both sides."""
        return self.bull.cost_basis + self.bear.cost_basis

    @property
    def total_pnl(self) -> Decimal:
        """Return combined P&L of both sides."""
        return self.bull.pnl + self.bear.pnl

    @property
    def return_pct(self) -> Decimal:
        """Return combined P&L as a percentage of combined cost basis."""
        cost = self.total_cost_basis
        return self.total_pnl / cost * HUNDRED if cost > ZERO else ZERO

    @property
    def has_bull_position(self) -> bool:
        """Return True when bull tokens are held."""
        return self.bull.balance > ZERO

    @property
    def has_bear_position(self) -> bool:
        """Return True when bear tokens are held."""
        return self.bear.balance > ZERO

    @property
    def has_position(self) -> bool:
        """Return True when tokens are held on either side."""
        return self.has_bull_position or self.has_bear_position


@dataclass(frozen=True)
class PortfolioSummary:
    """Portfolio-wide totals across every pool with a non-zero position.

    Args:
        positions: Metrics of the active positions, in input order.
        total_value: Sum of current values in SUI.
        total_cost_basis: Sum of cost bases in SUI.
        total_pnl: Sum of P&L in SUI.
        total_return_pct: Total P&L over total cost basis, in percent.

    """

    positions: tuple[PoolMetrics, ...]
    total_value: Decimal
    total_cost_basis: Decimal
    total_pnl: Decimal
    total_return_pct: Decimal

    @property
    def active_count(self) -> int:
        """Return the number of pools with a position."""
        return len(self.positions)

    @property
    def bull_positions(self) -> tuple[PoolMetrics, ...]:
        """Return positions holding bull tokens."""
        return tuple(p for p in self.positions if p.has_bull_position)

    @property
    def bear_positions(self) -> tuple[PoolMetrics, ...]:
        """Return positions holding bear tokens."""
        return tuple(p for p in self.positions if p.has_bear_position)


@dataclass(frozen=True)
class PoolOverview:
    """Market-level summary of a pool used by the explorer.

    Args:
        pool_id: Object id of the pool.
        name: Display name.
        description: Free-text description.
        pair_id: Oracle price-pair identifier.
        asset_name: Display name of the underlying asset.
        creator: Pool creator address.
        total_liquidity: Combined reserves in MIST.
        total_fee_bps: Sum of all fee rates in basis points.
        bull_pct: Bull share of reserves, in percent.
        bear_pct: Bear share of reserves, in percent.

    """

    pool_id: str
    name: str
    description: str
    pair_id: str
    asset_name: str
    creator: str
    total_liquidity: int
    total_fee_bps: int
    bull_pct: Decimal
    bear_pct: Decimal
