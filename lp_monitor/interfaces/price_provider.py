"""Price provider protocol: one link of the price fallback chain."""
from typing import Protocol

from ..models import TokenPrice


class PriceProvider(Protocol):
    """Abstract interface for a market-data price source."""

    @property
    def name(self) -> str: ...

    async def fetch(self, mint: str) -> TokenPrice | None: ...
