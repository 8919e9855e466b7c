"""Position analytics derived from pool snapshots and user positions.

Standalone pure functions over the immutable records in ``models``.  Token
prices are ``reserve / supply``; reserves and supplies share the 1e9 base
unit, so the ratio is already SUI per token.  Every division by a possibly
zero denominator returns ``ZERO`` instead.
"""

from collections.abc import Iterable
from decimal import Decimal

from fate_pools.apps.pool_sync.models import (
    HUNDRED,
    MIST_PER_SUI,
    ZERO,
    PoolMetrics,
    PoolOverview,
    PoolSnapshot,
    PoolState,
    PortfolioSummary,
    SideMetrics,
)

_EVEN_SPLIT = Decimal(50)


def token_price(reserve: int, supply: int) -> Decimal:
    """Return the token price in SUI, or zero when nothing is minted."""
    if supply == 0:
        return ZERO
    return Decimal(reserve) / Decimal(supply)


def side_metrics(reserve: int, supply: int, balance: int, avg_price: Decimal) -> SideMetrics:
    """Compute value and P&L for one side of a position.

    Args:
        reserve: SUI backing the side, in MIST.
        supply: Tokens minted on the side, smallest unit.
        balance: Tokens held by the user, smallest unit.
        avg_price: Average entry price in SUI per token.

    Returns:
        Price, value, cost basis, P&L and return for the side.

    """
    price = token_price(reserve, supply)
    units = Decimal(balance) / MIST_PER_SUI
    value = units * price
    cost_basis = units * avg_price
    pnl = value - cost_basis
    return_pct = pnl / cost_basis * HUNDRED if cost_basis > ZERO else ZERO
    return SideMetrics(
        price=price,
        balance=units,
        avg_price=avg_price,
        value=value,
        cost_basis=cost_basis,
        pnl=pnl,
        return_pct=return_pct,
    )


def pool_metrics(state: PoolState) -> PoolMetrics:
    """Compute bull and bear metrics for a pool state.

    A state without a position yields prices with zero holdings.
    """
    snapshot = state.snapshot
    position = state.position
    bull_balance = position.bull_balance if position else 0
    bear_balance = position.bear_balance if position else 0
    bull_avg = position.bull_avg_price if position else ZERO
    bear_avg = position.bear_avg_price if position else ZERO
    return PoolMetrics(
        pool_id=snapshot.pool_id,
        name=snapshot.name,
        bull=side_metrics(snapshot.bull_reserve, snapshot.bull_supply, bull_balance, bull_avg),
        bear=side_metrics(snapshot.bear_reserve, snapshot.bear_supply, bear_balance, bear_avg),
    )


def summarize_portfolio(states: Iterable[PoolState]) -> PortfolioSummary:
    """Aggregate metrics over every pool the user holds tokens in.

    Pools without a position, and pools that failed to load (and are
    therefore absent from ``states``), contribute nothing.

    Args:
        states: Loaded pool states, typically ``PoolLoadSession.results``.

    Returns:
        Portfolio totals and the active positions in input order.

    """
    positions = tuple(m for m in (pool_metrics(s) for s in states) if m.has_position)
    total_value = sum((m.total_value for m in positions), ZERO)
    total_cost = sum((m.total_cost_basis for m in positions), ZERO)
    total_pnl = sum((m.total_pnl for m in positions), ZERO)
    total_return = total_pnl / total_cost * HUNDRED if total_cost > ZERO else ZERO
    return PortfolioSummary(
        positions=positions,
        total_value=total_value,
        total_cost_basis=total_cost,
        total_pnl=total_pnl,
        total_return_pct=total_return,
    )


def reserve_split(snapshot: PoolSnapshot) -> tuple[Decimal, Decimal]:
    """Return bull and bear shares of total reserves in percent (50/50 if empty)."""
    total = snapshot.total_liquidity
    if total == 0:
        return _EVEN_SPLIT, _EVEN_SPLIT
    bull_pct = Decimal(snapshot.bull_reserve) / Decimal(total) * HUNDRED
    return bull_pct, HUNDRED - bull_pct


def pool_overview(snapshot: PoolSnapshot, asset_name: str = "") -> PoolOverview:
    """Build the market-level summary shown in the pool explorer.

    Args:
        snapshot: Pool snapshot.
        asset_name: Display name of the pool's underlying asset.

    Returns:
        Liquidity, fee and reserve-split summary.

    """
    bull_pct, bear_pct = reserve_split(snapshot)
    return PoolOverview(
        pool_id=snapshot.pool_id,
        name=snapshot.name,
        description=snapshot.description,
        pair_id=snapshot.pair_id,
        asset_name=asset_name,
        creator=snapshot.creator,
        total_liquidity=snapshot.total_liquidity,
        total_fee_bps=snapshot.total_fee_bps,
        bull_pct=bull_pct,
        bear_pct=bear_pct,
    )
