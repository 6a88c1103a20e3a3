"""Jupiter price API provider."""
import logging
import ssl
import time

import aiohttp
import certifi

from ..config import JupiterConfig
from ..models import UNKNOWN_SYMBOL, TokenPrice

logger = logging.getLogger(__name__)


class JupiterPriceProvider:
    """Fetch token prices from the Jupiter price API."""

    def __init__(
        self,
        config: JupiterConfig,
        timeout: float = 5.0,
        symbols: dict[str, str] | None = None,
    ) -> None:
        self.url = config.url
        self.timeout = timeout
        self.symbols = dict(symbols or {})

    @property
    def name(self) -> str:
        return "jupiter"

    async def fetch(self, mint: str) -> TokenPrice | None:
        """Fetch the current price of ``mint``; ``None`` when unavailable."""
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    self.url,
                    params={"ids": mint},
                    headers={"Accept": "application/json"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        logger.warning(
                            "Jupiter price request for %s failed: HTTP %s",
                            mint, response.status,
                        )
                        return None

                    data = await response.json()
        except Exception as e:
            logger.warning("Jupiter API error for %s: %s", mint, e)
            return None

        entry = (data.get("data") or {}).get(mint)
        if not entry or entry.get("price") is None:
            logger.debug("Jupiter has no price for %s", mint)
            return None

        try:
            price = float(entry["price"])
        except (TypeError, ValueError):
            logger.warning("Malformed Jupiter price for %s: %r", mint, entry["price"])
            return None

        return TokenPrice(
            mint=mint,
            symbol=self.symbols.get(mint, UNKNOWN_SYMBOL),
            price=price,
            source=self.name,
            timestamp=time.time(),
        )
