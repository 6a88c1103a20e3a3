"""Multi-source token price cache with TTL freshness."""
from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Awaitable, Callable, Iterable, Sequence

from ..interfaces.cache_store import CacheStore
from ..interfaces.price_provider import PriceProvider
from ..models import CacheStatus, TokenPrice, snapshot_to_dict
from ..pricing.synthetic import SyntheticPriceEstimator

logger = logging.getLogger(__name__)

STORE_KEY = "price_cache"
STORE_TTL_SECONDS = 60


class PriceCache:
    """Read-through price cache backed by an ordered provider chain.

    Lookups never raise: callers get a ``TokenPrice`` or ``None``. Entries
    are whole immutable values swapped under a lock, so a reader never sees
    a half-written entry.

    Args:
        providers: Price providers in priority order.
        ttl_seconds: Freshness window; an entry is fresh while
            ``now - timestamp < ttl_seconds``.
        batch_size: Mints fetched concurrently per batch in ``get_prices``.
        request_timeout: Upper bound for a single provider call.
        estimator: Synthetic fallback used when every provider fails. Leave
            unset to report absence instead.
        store: Optional cache store that receives the warmed map.
        clock: Time source in epoch seconds.
    """

    def __init__(
        self,
        providers: Sequence[PriceProvider],
        ttl_seconds: float = 10.0,
        batch_size: int = 10,
        request_timeout: float = 5.0,
        estimator: SyntheticPriceEstimator | None = None,
        store: CacheStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._providers = list(providers)
        self.ttl_seconds = ttl_seconds
        self.batch_size = max(1, batch_size)
        self.request_timeout = request_timeout
        self._estimator = estimator
        self._store = store
        self._clock = clock
        self._prices: dict[str, TokenPrice] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Freshness
    # ------------------------------------------------------------------

    def is_fresh(self, entry: TokenPrice) -> bool:
        return self._clock() - entry.timestamp < self.ttl_seconds

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_price(self, mint: str) -> TokenPrice | None:
        """Return a fresh cached price, refetching when missing or stale."""
        async with self._lock:
            cached = self._prices.get(mint)
        if cached is not None and self.is_fresh(cached):
            return cached
        return await self._fetch(mint)

    async def get_prices(self, mints: Iterable[str]) -> dict[str, TokenPrice]:
        """Look up many mints; unresolved mints are left out of the result."""
        return await self._batched(list(dict.fromkeys(mints)), self.get_price)

    async def refresh(self, mints: Iterable[str]) -> dict[str, TokenPrice]:
        """Refetch ``mints`` regardless of freshness (background warming)."""
        results = await self._batched(list(dict.fromkeys(mints)), self._fetch)
        await self._persist()
        return results

    async def _batched(
        self,
        mints: list[str],
        lookup: Callable[[str], Awaitable[TokenPrice | None]],
    ) -> dict[str, TokenPrice]:
        results: dict[str, TokenPrice] = {}
        for start in range(0, len(mints), self.batch_size):
            batch = mints[start:start + self.batch_size]
            outcomes = await asyncio.gather(
                *(lookup(mint) for mint in batch), return_exceptions=True
            )
            for mint, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error("Price lookup for %s failed: %s", mint, outcome)
                elif outcome is not None:
                    results[mint] = outcome
        return results

    # ------------------------------------------------------------------
    # Fallback chain
    # ------------------------------------------------------------------

    async def _fetch(self, mint: str) -> TokenPrice | None:
        for provider in self._providers:
            price = await self._try_provider(provider, mint)
            if price is not None:
                async with self._lock:
                    self._prices[mint] = price
                return price

        if self._estimator is not None:
            logger.warning("No price found for token %s, using synthetic price", mint)
            return self._estimator.estimate(mint)

        logger.warning("No price found for token %s", mint)
        return None

    async def _try_provider(
        self, provider: PriceProvider, mint: str
    ) -> TokenPrice | None:
        try:
            price = await asyncio.wait_for(
                provider.fetch(mint), timeout=self.request_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Price provider %s timed out for %s", provider.name, mint)
            return None
        except Exception as e:
            logger.warning("Price provider %s failed for %s: %s", provider.name, mint, e)
            return None

        if price is None:
            return None
        if not math.isfinite(price.price) or price.price <= 0:
            logger.warning(
                "Price provider %s returned invalid price %r for %s",
                provider.name, price.price, mint,
            )
            return None
        return price

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    async def get_all_cached_prices(self) -> dict[str, TokenPrice]:
        async with self._lock:
            return dict(self._prices)

    async def clear_cache(self) -> None:
        async with self._lock:
            self._prices = {}

    async def get_cache_status(self) -> CacheStatus:
        """Classify every entry as fresh or stale at call time."""
        async with self._lock:
            entries = list(self._prices.values())
        fresh = sum(1 for entry in entries if self.is_fresh(entry))
        return CacheStatus(total=len(entries), fresh=fresh, stale=len(entries) - fresh)

    async def sweep_expired(self) -> int:
        """Drop stale entries; returns how many were removed."""
        async with self._lock:
            stale = [mint for mint, entry in self._prices.items() if not self.is_fresh(entry)]
            for mint in stale:
                del self._prices[mint]
        return len(stale)

    async def _persist(self) -> None:
        if self._store is None:
            return
        prices = await self.get_all_cached_prices()
        payload = {mint: snapshot_to_dict(price) for mint, price in prices.items()}
        try:
            await self._store.set(STORE_KEY, payload, STORE_TTL_SECONDS)
        except Exception as e:
            logger.warning("Could not persist price cache: %s", e)
