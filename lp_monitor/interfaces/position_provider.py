"""Position provider protocols: wallet LP position lookup."""
from typing import Protocol

from ..models import LPPosition


class PositionProvider(Protocol):
    """Abstract interface for listing a wallet's LP positions."""

    async def get_wallet_positions(self, wallet_id: str) -> list[LPPosition]: ...


class PositionSource(Protocol):
    """Reader of real on-chain positions for a public key."""

    async def fetch_positions(self, public_key: str) -> list[LPPosition]: ...
