"""Fee and farming-reward lookups per position."""
from __future__ import annotations

import logging

from ..config import DataSourceMode
from ..models import FarmingRewards, FeeEarnings
from .synthetic_data import mock_farming_rewards, mock_fee_earnings

logger = logging.getLogger(__name__)


class FeeService:
    """Never raises: any failure yields the zero-value shape."""

    def __init__(self, mode: DataSourceMode = DataSourceMode.REAL) -> None:
        self._mode = mode

    async def calculate_position_fees(self, position_key: str) -> FeeEarnings:
        try:
            if self._mode is DataSourceMode.SYNTHETIC:
                return mock_fee_earnings(position_key)
            # Real fee accounting needs the protocol SDK; report nothing earned.
            return FeeEarnings.empty()
        except Exception as e:
            logger.error("Error calculating fees for position %s: %s", position_key, e)
            return FeeEarnings.empty()

    async def get_farming_rewards(self, position_key: str) -> FarmingRewards:
        try:
            if self._mode is DataSourceMode.SYNTHETIC:
                return mock_farming_rewards()
            return FarmingRewards.empty()
        except Exception as e:
            logger.error("Error getting farming rewards for position %s: %s", position_key, e)
            return FarmingRewards.empty()

