"""Monitoring jobs run by the scheduler, and service wiring from config."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from ..config import AppConfig, DataSourceMode
from ..interfaces.cache_store import CacheStore
from ..interfaces.position_provider import PositionSource
from ..interfaces.price_provider import PriceProvider
from ..models import RefreshReport, TokenPrice, WalletRefreshResult, snapshot_to_dict
from ..pricing import BirdeyePriceProvider, JupiterPriceProvider, SyntheticPriceEstimator
from ..storage import InMemoryCacheStore
from .fee_service import FeeService
from .portfolio import PortfolioService
from .position_service import PositionService
from .price_cache import PriceCache
from .scheduler import DailyTrigger, IntervalTrigger, TaskSpec

logger = logging.getLogger(__name__)

PRICE_UPDATES = "price-updates"
POSITION_UPDATES = "position-updates"
CACHE_SWEEP = "cache-sweep"
DATA_CLEANUP = "data-cleanup"
DAILY_ARCHIVE = "daily-archive"

# Registry of price provider factories keyed by provider name.
_PROVIDER_FACTORIES: dict[str, Callable[[AppConfig], PriceProvider]] = {
    "jupiter": lambda cfg: JupiterPriceProvider(
        cfg.providers.jupiter,
        timeout=cfg.price_cache.request_timeout,
        symbols=cfg.symbols_by_mint,
    ),
    "birdeye": lambda cfg: BirdeyePriceProvider(
        cfg.providers.birdeye,
        timeout=cfg.price_cache.request_timeout,
        symbols=cfg.symbols_by_mint,
    ),
}


def build_price_cache(config: AppConfig, store: CacheStore | None = None) -> PriceCache:
    """Providers in configured order; the estimator only in synthetic mode."""
    providers = [_PROVIDER_FACTORIES[name](config) for name in config.providers.order]
    estimator = None
    if config.data_source is DataSourceMode.SYNTHETIC:
        estimator = SyntheticPriceEstimator(symbols=config.symbols_by_mint)
    return PriceCache(
        providers,
        ttl_seconds=config.price_cache.ttl_seconds,
        batch_size=config.price_cache.batch_size,
        request_timeout=config.price_cache.request_timeout,
        estimator=estimator,
        store=store,
    )


class MonitorJobs:
    """Handlers for the recurring monitoring tasks.

    Every handler may raise; the scheduler isolates failures per run.
    """

    def __init__(
        self,
        config: AppConfig,
        price_cache: PriceCache,
        portfolio: PortfolioService,
        store: CacheStore | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._config = config
        self.price_cache = price_cache
        self.portfolio = portfolio
        self._store = store
        self._clock = clock

    @classmethod
    def from_config(
        cls, config: AppConfig, position_source: PositionSource | None = None
    ) -> MonitorJobs:
        store = InMemoryCacheStore()
        price_cache = build_price_cache(config, store)
        positions = PositionService(config.wallets, config.data_source, position_source)
        fees = FeeService(config.data_source)
        portfolio = PortfolioService(
            config.wallets, positions, fees, price_cache, config.portfolio.avg_apr_mode
        )
        return cls(config, price_cache, portfolio, store)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def update_prices(self) -> dict[str, TokenPrice]:
        watch_list = self._config.watch_list
        prices = await self.price_cache.refresh(watch_list)
        logger.info("Updated prices for %d/%d tokens", len(prices), len(watch_list))
        return prices

    async def _refresh_wallet(self, wallet_id: str) -> WalletRefreshResult:
        portfolio = await self.portfolio.get_wallet_portfolio(wallet_id)
        if self._store is not None:
            await self._store.set(
                f"portfolio:{wallet_id}",
                snapshot_to_dict(portfolio),
                self._config.scheduler.snapshot_ttl_seconds,
            )
        return WalletRefreshResult(
            wallet_id=wallet_id, success=True, position_count=portfolio.total_positions
        )

    async def update_positions(self) -> RefreshReport:
        """Rebuild every configured wallet's snapshot concurrently."""
        wallet_ids = self._config.configured_wallet_ids()
        if not wallet_ids:
            logger.warning("No configured wallets to refresh")
            return RefreshReport()

        outcomes = await asyncio.gather(
            *(self._refresh_wallet(wid) for wid in wallet_ids), return_exceptions=True
        )
        results: list[WalletRefreshResult] = []
        for wallet_id, outcome in zip(wallet_ids, outcomes):
            if isinstance(outcome, Exception):
                logger.error("Failed to update wallet %s: %s", wallet_id, outcome)
                results.append(
                    WalletRefreshResult(wallet_id=wallet_id, success=False, error=str(outcome))
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)

        report = RefreshReport(results=tuple(results))
        logger.info("Updated %d/%d wallets", report.succeeded, report.total)
        return report

    async def sweep_cache(self) -> int:
        removed = await self.price_cache.sweep_expired()
        status = await self.price_cache.get_cache_status()
        logger.info(
            "Price cache: %d entries (%d fresh, %d stale), %d swept",
            status.total, status.fresh, status.stale, removed,
        )
        if isinstance(self._store, InMemoryCacheStore):
            purged = await self._store.purge_expired()
            logger.debug("Purged %d expired store entries", purged)
        if self._store is not None:
            snapshots = await self._store.keys("portfolio:")
            logger.info("Store holds %d live portfolio snapshots", len(snapshots))
        return removed

    async def cleanup_data(self) -> None:
        await self.price_cache.clear_cache()
        logger.info("Price cache cleared")

    async def archive_daily(self) -> int:
        """Snapshot each configured wallet in turn; returns how many were archived."""
        day = self._clock().strftime("%Y-%m-%d")
        archived = 0
        for wallet_id in self._config.configured_wallet_ids():
            try:
                portfolio = await self.portfolio.get_wallet_portfolio(wallet_id)
            except Exception as e:
                logger.error("Daily archive failed for wallet %s: %s", wallet_id, e)
                continue

            logger.info(
                "Daily snapshot %s: %d positions, value $%.2f, unclaimed fees $%.2f",
                wallet_id,
                portfolio.total_positions,
                portfolio.total_value,
                portfolio.total_unclaimed_fees,
            )
            if self._store is not None:
                await self._store.set(
                    f"archive:{wallet_id}:{day}",
                    snapshot_to_dict(portfolio),
                    self._config.scheduler.archive_ttl_seconds,
                )
            archived += 1
        return archived

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def build_task_specs(self) -> list[TaskSpec]:
        sched = self._config.scheduler
        hour, minute = sched.daily_archive_hour_minute
        return [
            TaskSpec(PRICE_UPDATES, IntervalTrigger(sched.price_refresh_seconds), self.update_prices),
            TaskSpec(POSITION_UPDATES, IntervalTrigger(sched.position_refresh_seconds), self.update_positions),
            TaskSpec(CACHE_SWEEP, IntervalTrigger(sched.cache_sweep_seconds), self.sweep_cache),
            TaskSpec(DATA_CLEANUP, IntervalTrigger(sched.data_cleanup_seconds), self.cleanup_data),
            TaskSpec(DAILY_ARCHIVE, DailyTrigger(hour, minute), self.archive_daily),
        ]
