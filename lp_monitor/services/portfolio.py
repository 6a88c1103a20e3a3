"""Portfolio aggregation: positions + prices + fees → wallet snapshot."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone

from ..analytics import (
    DAYS_PER_MONTH,
    DAYS_PER_YEAR,
    build_portfolio_summary,
    summarize_unclaimed_fees,
)
from ..config import AprAverageMode, WalletConfig
from ..errors import WalletNotConfiguredError, WalletNotFoundError
from ..interfaces.fee_provider import FeeProvider
from ..interfaces.position_provider import PositionProvider
from ..models import (
    EarningsProjection,
    LPPosition,
    PortfolioSummary,
    TokenAsset,
    TokenPrice,
    UnclaimedFeesSummary,
    WalletLPPortfolio,
)
from .price_cache import PriceCache

logger = logging.getLogger(__name__)


class PortfolioService:
    """Build ``WalletLPPortfolio`` snapshots on demand.

    Holds no state between calls: every snapshot is folded from scratch, so
    the same inputs always produce the same summary.
    """

    def __init__(
        self,
        wallets: dict[str, WalletConfig],
        positions: PositionProvider,
        fees: FeeProvider,
        price_cache: PriceCache,
        avg_apr_mode: AprAverageMode = AprAverageMode.MEAN,
    ) -> None:
        self._wallets = wallets
        self._positions = positions
        self._fees = fees
        self._price_cache = price_cache
        self._avg_apr_mode = avg_apr_mode

    def _validate_wallet(self, wallet_id: str) -> WalletConfig:
        wallet = self._wallets.get(wallet_id)
        if wallet is None:
            raise WalletNotFoundError(wallet_id)
        if not wallet.is_configured:
            raise WalletNotConfiguredError(wallet_id)
        return wallet

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    async def get_wallet_portfolio(self, wallet_id: str) -> WalletLPPortfolio:
        wallet = self._validate_wallet(wallet_id)
        logger.info("Building LP portfolio for wallet %s", wallet_id)

        try:
            positions = await self._positions.get_wallet_positions(wallet_id)
        except Exception as e:
            logger.warning("Could not load positions for wallet %s: %s", wallet_id, e)
            positions = []

        positions = await self._mark_to_market(positions)
        enriched = await asyncio.gather(*(self._enrich(p) for p in positions))

        summary = build_portfolio_summary(enriched, self._avg_apr_mode)
        portfolio = WalletLPPortfolio(
            wallet_address=wallet.public_key,
            positions=tuple(enriched),
            summary=summary,
            last_updated=datetime.now(timezone.utc),
        )
        logger.info(
            "Wallet %s: %d positions, total value $%.2f",
            wallet_id, portfolio.total_positions, portfolio.total_value,
        )
        return portfolio

    async def _mark_to_market(self, positions: list[LPPosition]) -> list[LPPosition]:
        mints = [
            token.mint
            for p in positions
            for token in (p.liquidity_assets.token1, p.liquidity_assets.token2)
            if token.mint
        ]
        if not mints:
            return list(positions)

        prices = await self._price_cache.get_prices(mints)
        return [
            replace(
                p,
                liquidity_assets=replace(
                    p.liquidity_assets,
                    token1=_reprice(p.liquidity_assets.token1, prices),
                    token2=_reprice(p.liquidity_assets.token2, prices),
                ),
            )
            for p in positions
        ]

    async def _enrich(self, position: LPPosition) -> LPPosition:
        try:
            fees, rewards = await asyncio.gather(
                self._fees.calculate_position_fees(position.position_key),
                self._fees.get_farming_rewards(position.position_key),
            )
        except Exception as e:
            logger.warning(
                "Could not enrich position %s: %s", position.position_key, e
            )
            return position
        return replace(position, fee_earnings=fees, farming_rewards=rewards)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    async def get_wallet_summary(self, wallet_id: str) -> PortfolioSummary:
        portfolio = await self.get_wallet_portfolio(wallet_id)
        return portfolio.summary

    async def get_unclaimed_fees_summary(self, wallet_id: str) -> UnclaimedFeesSummary:
        portfolio = await self.get_wallet_portfolio(wallet_id)
        return summarize_unclaimed_fees(portfolio.positions)

    async def get_earnings_stats(self, wallet_id: str) -> EarningsProjection:
        stats = (await self.get_wallet_summary(wallet_id)).earnings_stats
        daily = stats.estimated_daily_earnings
        return EarningsProjection(
            total_liquidity_value=stats.total_liquidity_value,
            total_claimed_fees=stats.total_claimed_fees,
            total_unclaimed_fees=stats.total_unclaimed_fees,
            total_farming_rewards=stats.total_farming_rewards,
            estimated_daily_earnings=daily,
            estimated_monthly_earnings=daily * DAYS_PER_MONTH,
            estimated_yearly_earnings=daily * DAYS_PER_YEAR,
        )


def _reprice(token: TokenAsset, prices: dict[str, TokenPrice]) -> TokenAsset:
    quote = prices.get(token.mint)
    if quote is None:
        return token
    return replace(token, price=quote.price)
