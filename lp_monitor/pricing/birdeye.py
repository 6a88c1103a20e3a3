"""Birdeye public price API provider."""
import logging
import ssl
import time

import aiohttp
import certifi

from ..config import BirdeyeConfig
from ..models import UNKNOWN_SYMBOL, TokenPrice

logger = logging.getLogger(__name__)


class BirdeyePriceProvider:
    """Fetch token prices from Birdeye; the secondary market-data source."""

    def __init__(
        self,
        config: BirdeyeConfig,
        timeout: float = 5.0,
        symbols: dict[str, str] | None = None,
    ) -> None:
        self.url = config.url
        self.api_key = config.api_key
        self.timeout = timeout
        self.symbols = dict(symbols or {})

    @property
    def name(self) -> str:
        return "birdeye"

    async def fetch(self, mint: str) -> TokenPrice | None:
        """Fetch the current price of ``mint``; ``None`` when unavailable."""
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        headers = {
            "Accept": "application/json",
            "X-API-KEY": self.api_key,
            "x-chain": "solana",
        }

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    self.url,
                    params={"address": mint},
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        logger.warning(
                            "Birdeye price request for %s failed: HTTP %s",
                            mint, response.status,
                        )
                        return None

                    data = await response.json()
        except Exception as e:
            logger.warning("Birdeye API error for %s: %s", mint, e)
            return None

        payload = data.get("data") or {}
        if not data.get("success") or payload.get("value") is None:
            logger.debug("Birdeye has no price for %s", mint)
            return None

        try:
            price = float(payload["value"])
        except (TypeError, ValueError):
            logger.warning("Malformed Birdeye price for %s: %r", mint, payload["value"])
            return None

        return TokenPrice(
            mint=mint,
            symbol=self.symbols.get(mint, UNKNOWN_SYMBOL),
            price=price,
            source=self.name,
            timestamp=time.time(),
        )
