"""Shared test fixtures and sample data."""
from __future__ import annotations

import asyncio
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from lp_monitor.config import (
    PLACEHOLDER_PRIVATE_KEY,
    PLACEHOLDER_PUBLIC_KEY,
    AppConfig,
    DataSourceMode,
    WalletConfig,
)
from lp_monitor.models import (
    FeeBreakdown,
    FeeEarnings,
    LiquidityAssets,
    LPPosition,
    PriceRange,
    TokenAsset,
    TokenPrice,
)

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Settable epoch-seconds clock."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubPriceProvider:
    """Price provider answering from a fixed table, or raising ``error``."""

    def __init__(
        self,
        name: str,
        prices: dict[str, float] | None = None,
        clock: Callable[[], float] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._name = name
        self.prices = dict(prices or {})
        self.clock = clock or (lambda: 0.0)
        self.error = error
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self, mint: str) -> TokenPrice | None:
        self.calls.append(mint)
        if self.error is not None:
            raise self.error
        if mint not in self.prices:
            return None
        return TokenPrice(
            mint=mint,
            symbol="TKN",
            price=self.prices[mint],
            source=self._name,
            timestamp=self.clock(),
        )


class InFlightCounter:
    """Tracks how many callers are inside ``hold`` at the same time."""

    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    async def hold(self, seconds: float = 0.02) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)
        try:
            await asyncio.sleep(seconds)
        finally:
            self.current -= 1


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def stub_provider() -> type[StubPriceProvider]:
    return StubPriceProvider


@pytest.fixture()
def in_flight() -> InFlightCounter:
    return InFlightCounter()


# ---------------------------------------------------------------------------
# Model helpers
# ---------------------------------------------------------------------------


def make_token(symbol: str, value: float, mint: str = "", amount: float = 1.0) -> TokenAsset:
    """Token whose value is exactly ``value`` (price = value / amount)."""
    return TokenAsset(
        mint=mint or f"{symbol}-mint",
        symbol=symbol,
        decimals=6,
        amount=amount,
        price=value / amount if amount else 0.0,
    )


def make_position(
    key: str,
    liquidity: tuple[float, float],
    claimed: tuple[float, float] = (0.0, 0.0),
    unclaimed: tuple[float, float] = (0.0, 0.0),
    apr: float = 10.0,
    symbols: tuple[str, str] = ("SOL", "USDC"),
) -> LPPosition:
    def fees(values: tuple[float, float]) -> FeeBreakdown:
        return FeeBreakdown(
            token1=make_token(symbols[0], values[0], amount=1.0 if values[0] else 0.0),
            token2=make_token(symbols[1], values[1], amount=1.0 if values[1] else 0.0),
        )

    return LPPosition(
        pool_address=f"pool-{key}",
        position_key=key,
        liquidity_assets=LiquidityAssets(
            token1=make_token(symbols[0], liquidity[0]),
            token2=make_token(symbols[1], liquidity[1]),
        ),
        fee_earnings=FeeEarnings(claimed_fees=fees(claimed), unclaimed_fees=fees(unclaimed)),
        price_range=PriceRange(min_price=90.0, max_price=110.0, current_price=100.0),
        is_active=True,
        apr=apr,
        last_updated=FIXED_NOW,
    )


@pytest.fixture()
def position_a() -> LPPosition:
    return make_position(
        "position-a",
        liquidity=(501.46, 485.75),
        claimed=(4.77, 8.50),
        unclaimed=(2.86, 5.20),
        apr=18.5,
    )


@pytest.fixture()
def position_b() -> LPPosition:
    return make_position(
        "position-b",
        liquidity=(200.38, 195.46),
        claimed=(1.91, 3.20),
        unclaimed=(1.43, 2.80),
        apr=22.3,
        symbols=("SOL", "USDT"),
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_wallets() -> dict[str, WalletConfig]:
    return {
        "wallet1": WalletConfig(
            name="Main", public_key="PubKey111", private_key="PrivKey111"
        ),
        "wallet2": WalletConfig(
            name="Second", public_key="PubKey222", private_key="PrivKey222"
        ),
        "unset": WalletConfig(
            name="Unset",
            public_key=PLACEHOLDER_PUBLIC_KEY,
            private_key=PLACEHOLDER_PRIVATE_KEY,
        ),
    }


@pytest.fixture()
def sample_app_config(sample_wallets: dict[str, WalletConfig]) -> AppConfig:
    return AppConfig(
        data_source=DataSourceMode.SYNTHETIC,
        tokens={"SOL": SOL_MINT, "USDC": USDC_MINT, "USDT": USDT_MINT},
        wallets=sample_wallets,
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    data_source: synthetic
    tokens:
      SOL: So11111111111111111111111111111111111111112
      USDC: EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v
    price_cache:
      ttl_seconds: 15
      batch_size: 5
      request_timeout: 3
    providers:
      order: [birdeye, jupiter]
      jupiter:
        url: "https://jup.example.com/price"
      birdeye:
        url: "https://birdeye.example.com/price"
        api_key: "bird-key"
    scheduler:
      price_refresh_seconds: 20
      position_refresh_seconds: 60
      daily_archive_time: "07:30"
    portfolio:
      avg_apr_mode: legacy
    wallets:
      wallet1:
        name: Main wallet
        public_key: "PubKey111"
        private_key: "PrivKey111"
        description: test wallet
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


@pytest.fixture()
def token_factory() -> Callable[..., TokenAsset]:
    return make_token


@pytest.fixture()
def position_factory() -> Callable[..., LPPosition]:
    return make_position
