"""Data models: all frozen (immutable).

Derived totals are ``init=False`` fields filled in ``__post_init__`` so they
always agree with their parts. Build a changed copy with
``dataclasses.replace``; the totals are recomputed on the way.
"""
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime
from typing import Any

SYNTHETIC_SOURCE = "synthetic"
UNKNOWN_SYMBOL = "UNKNOWN"


def _set(obj: object, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class TokenAsset:
    """A token amount valued at a unit price."""

    mint: str
    symbol: str
    decimals: int
    amount: float
    price: float
    value: float = field(init=False)

    def __post_init__(self) -> None:
        _set(self, "value", self.amount * self.price)

    @classmethod
    def empty(cls) -> TokenAsset:
        return cls(mint="", symbol=UNKNOWN_SYMBOL, decimals=6, amount=0.0, price=0.0)


@dataclass(frozen=True)
class TokenPrice:
    """One price observation; ``timestamp`` is epoch seconds."""

    mint: str
    symbol: str
    price: float
    source: str
    timestamp: float

    @property
    def is_synthetic(self) -> bool:
        return self.source == SYNTHETIC_SOURCE


@dataclass(frozen=True)
class FeeBreakdown:
    """Claimed or unclaimed fees of a two-sided position."""

    token1: TokenAsset
    token2: TokenAsset
    total_value: float = field(init=False)

    def __post_init__(self) -> None:
        _set(self, "total_value", self.token1.value + self.token2.value)

    @classmethod
    def empty(cls) -> FeeBreakdown:
        return cls(token1=TokenAsset.empty(), token2=TokenAsset.empty())


@dataclass(frozen=True)
class FeeEarnings:
    claimed_fees: FeeBreakdown
    unclaimed_fees: FeeBreakdown
    total_fee_value: float = field(init=False)

    def __post_init__(self) -> None:
        _set(
            self,
            "total_fee_value",
            self.claimed_fees.total_value + self.unclaimed_fees.total_value,
        )

    @classmethod
    def empty(cls) -> FeeEarnings:
        return cls(claimed_fees=FeeBreakdown.empty(), unclaimed_fees=FeeBreakdown.empty())


@dataclass(frozen=True)
class LiquidityAssets:
    token1: TokenAsset
    token2: TokenAsset
    total_liquidity_value: float = field(init=False)

    def __post_init__(self) -> None:
        _set(self, "total_liquidity_value", self.token1.value + self.token2.value)


@dataclass(frozen=True)
class FarmingRewards:
    reward_tokens: tuple[TokenAsset, ...] = ()
    total_reward_value: float = field(init=False)

    def __post_init__(self) -> None:
        _set(self, "total_reward_value", sum(t.value for t in self.reward_tokens))

    @classmethod
    def empty(cls) -> FarmingRewards:
        return cls()


@dataclass(frozen=True)
class PriceRange:
    min_price: float
    max_price: float
    current_price: float


@dataclass(frozen=True)
class LPPosition:
    """A single liquidity position with its fees and rewards."""

    pool_address: str
    position_key: str
    liquidity_assets: LiquidityAssets
    fee_earnings: FeeEarnings
    price_range: PriceRange
    is_active: bool
    apr: float
    last_updated: datetime
    farming_rewards: FarmingRewards | None = None
    total_position_value: float = field(init=False)

    def __post_init__(self) -> None:
        rewards = self.farming_rewards.total_reward_value if self.farming_rewards else 0.0
        _set(
            self,
            "total_position_value",
            self.liquidity_assets.total_liquidity_value
            + self.fee_earnings.total_fee_value
            + rewards,
        )

    @property
    def pair_name(self) -> str:
        return f"{self.liquidity_assets.token1.symbol}/{self.liquidity_assets.token2.symbol}"


# ---------------------------------------------------------------------------
# Portfolio summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenSources:
    liquidity: float = 0.0
    claimed_fees: float = 0.0
    unclaimed_fees: float = 0.0
    farming: float = 0.0


@dataclass(frozen=True)
class TokenTotals:
    total_amount: float = 0.0
    total_value: float = 0.0
    sources: TokenSources = field(default_factory=TokenSources)


@dataclass(frozen=True)
class PoolTotals:
    position_count: int = 0
    total_value: float = 0.0
    total_fees: float = 0.0
    avg_apr: float = 0.0


@dataclass(frozen=True)
class EarningsStats:
    total_liquidity_value: float = 0.0
    total_claimed_fees: float = 0.0
    total_unclaimed_fees: float = 0.0
    total_farming_rewards: float = 0.0
    estimated_daily_earnings: float = 0.0


@dataclass(frozen=True)
class PortfolioSummary:
    token_breakdown: dict[str, TokenTotals] = field(default_factory=dict)
    pool_breakdown: dict[str, PoolTotals] = field(default_factory=dict)
    earnings_stats: EarningsStats = field(default_factory=EarningsStats)


@dataclass(frozen=True)
class WalletLPPortfolio:
    """Snapshot of one wallet's LP holdings."""

    wallet_address: str
    positions: tuple[LPPosition, ...]
    summary: PortfolioSummary
    last_updated: datetime
    total_value: float = field(init=False)
    total_positions: int = field(init=False)
    total_unclaimed_fees: float = field(init=False)

    def __post_init__(self) -> None:
        _set(self, "total_value", sum(p.total_position_value for p in self.positions))
        _set(self, "total_positions", len(self.positions))
        _set(
            self,
            "total_unclaimed_fees",
            sum(p.fee_earnings.unclaimed_fees.total_value for p in self.positions),
        )


@dataclass(frozen=True)
class TokenAmount:
    amount: float = 0.0
    value: float = 0.0


@dataclass(frozen=True)
class PoolFees:
    value: float = 0.0
    positions: int = 0


@dataclass(frozen=True)
class UnclaimedFeesSummary:
    total_value: float
    by_token: dict[str, TokenAmount]
    by_pool: dict[str, PoolFees]


@dataclass(frozen=True)
class EarningsProjection:
    total_liquidity_value: float
    total_claimed_fees: float
    total_unclaimed_fees: float
    total_farming_rewards: float
    estimated_daily_earnings: float
    estimated_monthly_earnings: float
    estimated_yearly_earnings: float


# ---------------------------------------------------------------------------
# Cache and scheduler reporting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CacheStatus:
    total: int
    fresh: int
    stale: int


@dataclass(frozen=True)
class WalletRefreshResult:
    wallet_id: str
    success: bool
    position_count: int = 0
    error: str = ""


@dataclass(frozen=True)
class RefreshReport:
    """Outcome of a fan-out refresh across wallets."""

    results: tuple[WalletRefreshResult, ...] = ()

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_wallets(self) -> list[str]:
        return [r.wallet_id for r in self.results if not r.success]


@dataclass(frozen=True)
class TaskStatus:
    name: str
    running: bool
    enabled: bool


@dataclass(frozen=True)
class SchedulerStatus:
    is_running: bool
    task_count: int
    tasks: tuple[TaskStatus, ...] = ()


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def snapshot_to_dict(obj: Any) -> dict[str, Any]:
    """Convert a model instance into plain JSON-friendly data."""
    if not is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"Expected a dataclass instance, got {type(obj).__name__}")
    return _jsonable(asdict(obj))
