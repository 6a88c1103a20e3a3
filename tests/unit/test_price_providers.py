"""Unit tests for price providers: response parsing and error handling."""
from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lp_monitor.config import BirdeyeConfig, JupiterConfig
from lp_monitor.pricing import BirdeyePriceProvider, JupiterPriceProvider, SyntheticPriceEstimator

SOL = "So11111111111111111111111111111111111111112"


def _mock_session(status: int = 200, data: Any = None) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


@pytest.fixture()
def jupiter() -> JupiterPriceProvider:
    return JupiterPriceProvider(JupiterConfig(url="https://jup.example.com"), symbols={SOL: "SOL"})


@pytest.fixture()
def birdeye() -> BirdeyePriceProvider:
    return BirdeyePriceProvider(
        BirdeyeConfig(url="https://birdeye.example.com", api_key="key-123"),
        symbols={SOL: "SOL"},
    )


class TestJupiterPriceProvider:
    @pytest.mark.asyncio
    async def test_parses_response(self, jupiter: JupiterPriceProvider) -> None:
        session = _mock_session(data={"data": {SOL: {"id": SOL, "price": "95.42"}}})

        with patch("lp_monitor.pricing.jupiter.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.jupiter.aiohttp.TCPConnector"):
                price = await jupiter.fetch(SOL)

        assert price is not None
        assert price.price == pytest.approx(95.42)
        assert price.symbol == "SOL"
        assert price.source == "jupiter"
        assert session.get.call_args.kwargs["params"] == {"ids": SOL}

    @pytest.mark.asyncio
    async def test_missing_mint_returns_none(self, jupiter: JupiterPriceProvider) -> None:
        session = _mock_session(data={"data": {}})

        with patch("lp_monitor.pricing.jupiter.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.jupiter.aiohttp.TCPConnector"):
                assert await jupiter.fetch(SOL) is None

    @pytest.mark.asyncio
    async def test_handles_http_error(self, jupiter: JupiterPriceProvider) -> None:
        session = _mock_session(status=500)

        with patch("lp_monitor.pricing.jupiter.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.jupiter.aiohttp.TCPConnector"):
                assert await jupiter.fetch(SOL) is None

    @pytest.mark.asyncio
    async def test_handles_network_error(self, jupiter: JupiterPriceProvider) -> None:
        session = _mock_session()
        session.get = MagicMock(side_effect=ConnectionError("timeout"))

        with patch("lp_monitor.pricing.jupiter.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.jupiter.aiohttp.TCPConnector"):
                assert await jupiter.fetch(SOL) is None

    @pytest.mark.asyncio
    async def test_malformed_price(self, jupiter: JupiterPriceProvider) -> None:
        session = _mock_session(data={"data": {SOL: {"price": "n/a"}}})

        with patch("lp_monitor.pricing.jupiter.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.jupiter.aiohttp.TCPConnector"):
                assert await jupiter.fetch(SOL) is None


class TestBirdeyePriceProvider:
    @pytest.mark.asyncio
    async def test_parses_response(self, birdeye: BirdeyePriceProvider) -> None:
        session = _mock_session(data={"success": True, "data": {"value": 96.1}})

        with patch("lp_monitor.pricing.birdeye.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.birdeye.aiohttp.TCPConnector"):
                price = await birdeye.fetch(SOL)

        assert price is not None
        assert price.price == pytest.approx(96.1)
        assert price.source == "birdeye"
        kwargs = session.get.call_args.kwargs
        assert kwargs["params"] == {"address": SOL}
        assert kwargs["headers"]["X-API-KEY"] == "key-123"
        assert kwargs["headers"]["x-chain"] == "solana"

    @pytest.mark.asyncio
    async def test_unsuccessful_payload(self, birdeye: BirdeyePriceProvider) -> None:
        session = _mock_session(data={"success": False, "data": {"value": 96.1}})

        with patch("lp_monitor.pricing.birdeye.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.birdeye.aiohttp.TCPConnector"):
                assert await birdeye.fetch(SOL) is None

    @pytest.mark.asyncio
    async def test_missing_value(self, birdeye: BirdeyePriceProvider) -> None:
        session = _mock_session(data={"success": True, "data": {}})

        with patch("lp_monitor.pricing.birdeye.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.birdeye.aiohttp.TCPConnector"):
                assert await birdeye.fetch(SOL) is None

    @pytest.mark.asyncio
    async def test_handles_http_error(self, birdeye: BirdeyePriceProvider) -> None:
        session = _mock_session(status=429)

        with patch("lp_monitor.pricing.birdeye.aiohttp.ClientSession", return_value=session):
            with patch("lp_monitor.pricing.birdeye.aiohttp.TCPConnector"):
                assert await birdeye.fetch(SOL) is None


class TestSyntheticPriceEstimator:
    def test_deterministic_per_mint(self) -> None:
        estimator = SyntheticPriceEstimator(symbols={SOL: "SOL"})
        assert estimator.estimate(SOL).price == estimator.estimate(SOL).price

    def test_within_jitter_of_base(self) -> None:
        price = SyntheticPriceEstimator(symbols={SOL: "SOL"}).estimate(SOL)
        assert 95.42 * 0.98 <= price.price <= 95.42 * 1.02
        assert price.symbol == "SOL"
        assert price.is_synthetic

    def test_unknown_symbol_uses_default_base(self) -> None:
        price = SyntheticPriceEstimator().estimate("SomeMint")
        assert price.symbol == "UNKNOWN"
        assert 0.98 <= price.price <= 1.02

    def test_price_floor(self) -> None:
        estimator = SyntheticPriceEstimator(symbols={"m": "DUST"}, base_prices={"DUST": 0.0})
        assert estimator.estimate("m").price == pytest.approx(0.000001)

    def test_timestamp_from_clock(self) -> None:
        estimator = SyntheticPriceEstimator(clock=lambda: 1234.5)
        assert estimator.estimate("m").timestamp == 1234.5
