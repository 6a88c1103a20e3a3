"""Wallet LP position lookup with an explicit synthetic fallback."""
from __future__ import annotations

import logging

from ..config import DataSourceMode, WalletConfig
from ..errors import WalletNotConfiguredError, WalletNotFoundError
from ..interfaces.position_provider import PositionSource
from ..models import LPPosition
from .synthetic_data import mock_positions

logger = logging.getLogger(__name__)


class PositionService:
    """List LP positions for configured wallets.

    In synthetic mode the demo set is returned and the substitution is
    logged. In real mode positions come from ``source``. Wallets still
    holding placeholder keys are rejected.
    """

    def __init__(
        self,
        wallets: dict[str, WalletConfig],
        mode: DataSourceMode = DataSourceMode.REAL,
        source: PositionSource | None = None,
    ) -> None:
        self._wallets = wallets
        self._mode = mode
        self._source = source

    async def get_wallet_positions(self, wallet_id: str) -> list[LPPosition]:
        wallet = self._wallets.get(wallet_id)
        if wallet is None:
            raise WalletNotFoundError(wallet_id)

        if not wallet.is_configured:
            raise WalletNotConfiguredError(wallet_id)

        if self._mode is DataSourceMode.SYNTHETIC:
            logger.info("Using synthetic LP positions for wallet %s", wallet_id)
            return mock_positions()

        if self._source is None:
            logger.warning(
                "No on-chain position source configured; wallet %s has no positions",
                wallet_id,
            )
            return []

        positions = await self._source.fetch_positions(wallet.public_key)
        logger.info("Found %d LP positions for wallet %s", len(positions), wallet_id)
        return positions

