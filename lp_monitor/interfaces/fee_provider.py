"""Fee provider protocol: per-position fee and reward computation."""
from typing import Protocol

from ..models import FarmingRewards, FeeEarnings


class FeeProvider(Protocol):
    """Abstract interface for fee and reward lookups.

    Implementations return the zero-value shape instead of raising.
    """

    async def calculate_position_fees(self, position_key: str) -> FeeEarnings: ...

    async def get_farming_rewards(self, position_key: str) -> FarmingRewards: ...
