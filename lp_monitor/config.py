"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import enum
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Placeholder values shipped in the sample wallet file.
PLACEHOLDER_PUBLIC_KEY = "REPLACE_WITH_PUBLIC_KEY"
PLACEHOLDER_PRIVATE_KEY = "REPLACE_WITH_PRIVATE_KEY"

DEFAULT_TOKENS: dict[str, str] = {
    "SOL": "So11111111111111111111111111111111111111112",
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "USDT": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "mSOL": "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So",
    "stSOL": "7dHbWXmci3dT8UFYWYZweBLXgycu7Y3iL6trKn1Y7ARj",
    "BONK": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    "WIF": "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
    "JUP": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
}

KNOWN_PROVIDERS = ("jupiter", "birdeye")

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class DataSourceMode(str, enum.Enum):
    """Whether synthetic data may stand in when real sources are unavailable."""

    REAL = "real"
    SYNTHETIC = "synthetic"


class AprAverageMode(str, enum.Enum):
    """How the pool breakdown averages position APRs."""

    MEAN = "mean"
    LEGACY = "legacy"


# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PriceCacheConfig:
    ttl_seconds: float = 10.0
    batch_size: int = 10
    request_timeout: float = 5.0
    watch_list: tuple[str, ...] = ()


@dataclass(frozen=True)
class JupiterConfig:
    url: str = "https://api.jup.ag/price/v2"


@dataclass(frozen=True)
class BirdeyeConfig:
    url: str = "https://public-api.birdeye.so/defi/price"
    api_key: str = ""


@dataclass(frozen=True)
class ProvidersConfig:
    order: tuple[str, ...] = KNOWN_PROVIDERS
    jupiter: JupiterConfig = field(default_factory=JupiterConfig)
    birdeye: BirdeyeConfig = field(default_factory=BirdeyeConfig)


@dataclass(frozen=True)
class SchedulerConfig:
    price_refresh_seconds: float = 10.0
    position_refresh_seconds: float = 30.0
    cache_sweep_seconds: float = 300.0
    data_cleanup_seconds: float = 3600.0
    daily_archive_time: str = "08:00"
    snapshot_ttl_seconds: int = 300
    archive_ttl_seconds: int = 7 * 24 * 3600

    @property
    def daily_archive_hour_minute(self) -> tuple[int, int]:
        hour, minute = self.daily_archive_time.split(":")
        return int(hour), int(minute)


@dataclass(frozen=True)
class PortfolioConfig:
    avg_apr_mode: AprAverageMode = AprAverageMode.MEAN


@dataclass(frozen=True)
class WalletConfig:
    name: str = ""
    public_key: str = ""
    private_key: str = ""
    description: str = ""

    @property
    def is_configured(self) -> bool:
        """True when both keys are present and not the sample placeholders."""
        return (
            bool(self.public_key)
            and bool(self.private_key)
            and self.public_key != PLACEHOLDER_PUBLIC_KEY
            and self.private_key != PLACEHOLDER_PRIVATE_KEY
        )


@dataclass(frozen=True)
class AppConfig:
    data_source: DataSourceMode = DataSourceMode.REAL
    tokens: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TOKENS))
    price_cache: PriceCacheConfig = field(default_factory=PriceCacheConfig)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)
    wallets: dict[str, WalletConfig] = field(default_factory=dict)

    @property
    def watch_list(self) -> tuple[str, ...]:
        """Mints warmed by the background price job."""
        return self.price_cache.watch_list or tuple(self.tokens.values())

    @property
    def symbols_by_mint(self) -> dict[str, str]:
        return {mint: symbol for symbol, mint in self.tokens.items()}

    def configured_wallet_ids(self) -> list[str]:
        """Wallet ids eligible for monitoring (valid credentials present)."""
        return [wid for wid, w in self.wallets.items() if w.is_configured]


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_price_cache(raw: dict[str, Any]) -> PriceCacheConfig:
    return PriceCacheConfig(
        ttl_seconds=float(raw.get("ttl_seconds", 10.0)),
        batch_size=int(raw.get("batch_size", 10)),
        request_timeout=float(raw.get("request_timeout", 5.0)),
        watch_list=tuple(raw.get("watch_list", [])),
    )


def _build_providers(raw: dict[str, Any]) -> ProvidersConfig:
    jup = raw.get("jupiter", {})
    bird = raw.get("birdeye", {})
    return ProvidersConfig(
        order=tuple(raw.get("order", KNOWN_PROVIDERS)),
        jupiter=JupiterConfig(url=jup.get("url", JupiterConfig.url)),
        birdeye=BirdeyeConfig(
            url=bird.get("url", BirdeyeConfig.url),
            api_key=bird.get("api_key", ""),
        ),
    )


def _build_scheduler(raw: dict[str, Any]) -> SchedulerConfig:
    return SchedulerConfig(
        price_refresh_seconds=float(raw.get("price_refresh_seconds", 10.0)),
        position_refresh_seconds=float(raw.get("position_refresh_seconds", 30.0)),
        cache_sweep_seconds=float(raw.get("cache_sweep_seconds", 300.0)),
        data_cleanup_seconds=float(raw.get("data_cleanup_seconds", 3600.0)),
        daily_archive_time=str(raw.get("daily_archive_time", "08:00")),
        snapshot_ttl_seconds=int(raw.get("snapshot_ttl_seconds", 300)),
        archive_ttl_seconds=int(raw.get("archive_ttl_seconds", 7 * 24 * 3600)),
    )


def _build_portfolio(raw: dict[str, Any]) -> PortfolioConfig:
    return PortfolioConfig(
        avg_apr_mode=AprAverageMode(raw.get("avg_apr_mode", "mean")),
    )


def _build_wallets(raw: dict[str, Any]) -> dict[str, WalletConfig]:
    wallets: dict[str, WalletConfig] = {}
    for wallet_id, w in raw.items():
        wallets[wallet_id] = WalletConfig(
            name=w.get("name", wallet_id),
            public_key=w.get("public_key", ""),
            private_key=w.get("private_key", ""),
            description=w.get("description", ""),
        )
    return wallets


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    try:
        cfg = AppConfig(
            data_source=DataSourceMode(raw.get("data_source", "real")),
            tokens=dict(raw.get("tokens", DEFAULT_TOKENS)),
            price_cache=_build_price_cache(raw.get("price_cache", {})),
            providers=_build_providers(raw.get("providers", {})),
            scheduler=_build_scheduler(raw.get("scheduler", {})),
            portfolio=_build_portfolio(raw.get("portfolio", {})),
            wallets=_build_wallets(raw.get("wallets", {})),
        )
    except ValueError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.wallets:
        raise ValueError("At least one wallet must be configured")

    for wallet_id, wallet in cfg.wallets.items():
        if not wallet.public_key:
            raise ValueError(f"Wallet '{wallet_id}' has no public key")

    pc = cfg.price_cache
    if pc.ttl_seconds <= 0:
        raise ValueError("price_cache.ttl_seconds must be positive")
    if pc.batch_size <= 0:
        raise ValueError("price_cache.batch_size must be positive")
    if pc.request_timeout <= 0:
        raise ValueError("price_cache.request_timeout must be positive")
    if any(not mint for mint in pc.watch_list):
        raise ValueError("price_cache.watch_list contains an empty mint")

    for name in cfg.providers.order:
        if name not in KNOWN_PROVIDERS:
            raise ValueError(f"Unknown price provider '{name}'")

    sched = cfg.scheduler
    for attr in (
        "price_refresh_seconds",
        "position_refresh_seconds",
        "cache_sweep_seconds",
        "data_cleanup_seconds",
    ):
        if getattr(sched, attr) <= 0:
            raise ValueError(f"scheduler.{attr} must be positive")
    if not _TIME_RE.match(sched.daily_archive_time):
        raise ValueError(
            f"scheduler.daily_archive_time must be HH:MM, got '{sched.daily_archive_time}'"
        )
