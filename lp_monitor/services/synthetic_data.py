"""Deterministic demo data served in synthetic mode."""
from __future__ import annotations

from datetime import datetime, timezone

from ..config import DEFAULT_TOKENS
from ..models import (
    FarmingRewards,
    FeeBreakdown,
    FeeEarnings,
    LiquidityAssets,
    LPPosition,
    PriceRange,
    TokenAsset,
)

SOL_MINT = DEFAULT_TOKENS["SOL"]
USDC_MINT = DEFAULT_TOKENS["USDC"]
USDT_MINT = DEFAULT_TOKENS["USDT"]
SOL_PRICE = 95.42


def sol(amount: float) -> TokenAsset:
    return TokenAsset(mint=SOL_MINT, symbol="SOL", decimals=9, amount=amount, price=SOL_PRICE)


def usdc(amount: float) -> TokenAsset:
    return TokenAsset(mint=USDC_MINT, symbol="USDC", decimals=6, amount=amount, price=1.0)


def usdt(amount: float) -> TokenAsset:
    return TokenAsset(mint=USDT_MINT, symbol="USDT", decimals=6, amount=amount, price=0.9998)


def mock_fee_earnings(position_key: str) -> FeeEarnings:
    """Keys containing ``"1"`` get the SOL/USDC set, everything else SOL/USDT."""
    if "1" in position_key:
        return FeeEarnings(
            claimed_fees=FeeBreakdown(token1=sol(0.05), token2=usdc(8.5)),
            unclaimed_fees=FeeBreakdown(token1=sol(0.03), token2=usdc(5.2)),
        )
    return FeeEarnings(
        claimed_fees=FeeBreakdown(token1=sol(0.02), token2=usdt(3.2)),
        unclaimed_fees=FeeBreakdown(token1=sol(0.015), token2=usdt(2.8)),
    )


def mock_farming_rewards() -> FarmingRewards:
    return FarmingRewards(reward_tokens=(sol(0.01),))


def mock_positions(now: datetime | None = None) -> list[LPPosition]:
    now = now or datetime.now(timezone.utc)
    return [
        LPPosition(
            pool_address="mock-pool-sol-usdc",
            position_key="mock-position-1",
            liquidity_assets=LiquidityAssets(token1=sol(5.25), token2=usdc(485.75)),
            fee_earnings=mock_fee_earnings("mock-position-1"),
            price_range=PriceRange(min_price=85.0, max_price=105.0, current_price=SOL_PRICE),
            is_active=True,
            apr=18.5,
            last_updated=now,
        ),
        LPPosition(
            pool_address="mock-pool-sol-usdt",
            position_key="mock-position-2",
            liquidity_assets=LiquidityAssets(token1=sol(2.1), token2=usdt(195.5)),
            fee_earnings=mock_fee_earnings("mock-position-2"),
            price_range=PriceRange(min_price=90.0, max_price=100.0, current_price=SOL_PRICE),
            is_active=True,
            apr=22.3,
            last_updated=now,
        ),
    ]
