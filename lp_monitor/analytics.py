"""Pure portfolio math: no I/O.

The summary fold only ever adds to fresh accumulators, so a fixed position
list always yields the same summary.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .config import AprAverageMode
from .models import (
    EarningsStats,
    LPPosition,
    PoolFees,
    PoolTotals,
    PortfolioSummary,
    TokenAmount,
    TokenAsset,
    TokenSources,
    TokenTotals,
    UnclaimedFeesSummary,
)

DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30


def calculate_apr(fees_24h: float, tvl: float) -> float:
    """Annualised fee rate as a percentage; zero when there is no TVL."""
    if tvl <= 0:
        return 0.0
    return (fees_24h / tvl) * DAYS_PER_YEAR * 100


def calculate_daily_yield(fees_24h: float, tvl: float) -> float:
    """Daily fee yield as a percentage; zero when there is no TVL."""
    if tvl <= 0:
        return 0.0
    return (fees_24h / tvl) * 100


def estimate_daily_earnings(positions: Iterable[LPPosition]) -> float:
    """Sum of ``value * apr / 365 / 100`` over positions."""
    return sum(
        p.total_position_value * (p.apr / DAYS_PER_YEAR / 100) for p in positions
    )


# ---------------------------------------------------------------------------
# Token breakdown
# ---------------------------------------------------------------------------


def _add_token(
    breakdown: dict[str, TokenTotals], token: TokenAsset, source: str
) -> None:
    totals = breakdown.get(token.symbol, TokenTotals())
    sources = replace(
        totals.sources, **{source: getattr(totals.sources, source) + token.value}
    )
    breakdown[token.symbol] = TokenTotals(
        total_amount=totals.total_amount + token.amount,
        total_value=totals.total_value + token.value,
        sources=sources,
    )


def fold_token_breakdown(
    breakdown: dict[str, TokenTotals], position: LPPosition
) -> None:
    """Attribute every token of ``position`` to its source bucket.

    Liquidity tokens always count; fee and reward tokens only when their
    amount is positive.
    """
    liquidity = position.liquidity_assets
    for token in (liquidity.token1, liquidity.token2):
        _add_token(breakdown, token, "liquidity")

    claimed = position.fee_earnings.claimed_fees
    for token in (claimed.token1, claimed.token2):
        if token.amount > 0:
            _add_token(breakdown, token, "claimed_fees")

    unclaimed = position.fee_earnings.unclaimed_fees
    for token in (unclaimed.token1, unclaimed.token2):
        if token.amount > 0:
            _add_token(breakdown, token, "unclaimed_fees")

    if position.farming_rewards:
        for token in position.farming_rewards.reward_tokens:
            if token.amount > 0:
                _add_token(breakdown, token, "farming")


# ---------------------------------------------------------------------------
# Pool breakdown
# ---------------------------------------------------------------------------


def fold_pool_breakdown(
    breakdown: dict[str, PoolTotals],
    position: LPPosition,
    avg_apr_mode: AprAverageMode = AprAverageMode.MEAN,
) -> None:
    """Accumulate ``position`` into its pair's totals.

    ``MEAN`` keeps a true running mean of APR. ``LEGACY`` reproduces the
    historical ``(avg + apr) / count`` update, which drifts once a pool holds
    three or more positions.
    """
    pool = breakdown.get(position.pair_name, PoolTotals())
    count = pool.position_count + 1
    if avg_apr_mode is AprAverageMode.LEGACY:
        avg_apr = (pool.avg_apr + position.apr) / count
    else:
        avg_apr = pool.avg_apr + (position.apr - pool.avg_apr) / count

    breakdown[position.pair_name] = PoolTotals(
        position_count=count,
        total_value=pool.total_value + position.total_position_value,
        total_fees=pool.total_fees + position.fee_earnings.total_fee_value,
        avg_apr=avg_apr,
    )


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def build_portfolio_summary(
    positions: Iterable[LPPosition],
    avg_apr_mode: AprAverageMode = AprAverageMode.MEAN,
) -> PortfolioSummary:
    """Fold a position list into token, pool and earnings rollups."""
    positions = list(positions)
    token_breakdown: dict[str, TokenTotals] = {}
    pool_breakdown: dict[str, PoolTotals] = {}

    total_liquidity = 0.0
    total_claimed = 0.0
    total_unclaimed = 0.0
    total_farming = 0.0

    for position in positions:
        total_liquidity += position.liquidity_assets.total_liquidity_value
        total_claimed += position.fee_earnings.claimed_fees.total_value
        total_unclaimed += position.fee_earnings.unclaimed_fees.total_value
        if position.farming_rewards:
            total_farming += position.farming_rewards.total_reward_value

        fold_token_breakdown(token_breakdown, position)
        fold_pool_breakdown(pool_breakdown, position, avg_apr_mode)

    return PortfolioSummary(
        token_breakdown=token_breakdown,
        pool_breakdown=pool_breakdown,
        earnings_stats=EarningsStats(
            total_liquidity_value=total_liquidity,
            total_claimed_fees=total_claimed,
            total_unclaimed_fees=total_unclaimed,
            total_farming_rewards=total_farming,
            estimated_daily_earnings=estimate_daily_earnings(positions),
        ),
    )


def summarize_unclaimed_fees(positions: Iterable[LPPosition]) -> UnclaimedFeesSummary:
    """Regroup unclaimed fees by token symbol and by pool pair."""
    by_token: dict[str, TokenAmount] = {}
    by_pool: dict[str, PoolFees] = {}
    total = 0.0

    for position in positions:
        unclaimed = position.fee_earnings.unclaimed_fees

        pool = by_pool.get(position.pair_name, PoolFees())
        by_pool[position.pair_name] = PoolFees(
            value=pool.value + unclaimed.total_value,
            positions=pool.positions + 1,
        )

        for token in (unclaimed.token1, unclaimed.token2):
            if token.amount > 0:
                entry = by_token.get(token.symbol, TokenAmount())
                by_token[token.symbol] = TokenAmount(
                    amount=entry.amount + token.amount,
                    value=entry.value + token.value,
                )

        total += unclaimed.total_value

    return UnclaimedFeesSummary(total_value=total, by_token=by_token, by_pool=by_pool)
