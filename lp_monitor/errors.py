"""Validation errors surfaced to callers of the portfolio service."""
from __future__ import annotations


class WalletError(Exception):
    """Base class for wallet lookup failures."""

    def __init__(self, wallet_id: str, message: str) -> None:
        super().__init__(message)
        self.wallet_id = wallet_id


class WalletNotFoundError(WalletError):
    def __init__(self, wallet_id: str) -> None:
        super().__init__(wallet_id, f"Wallet {wallet_id} not found")


class WalletNotConfiguredError(WalletError):
    def __init__(self, wallet_id: str) -> None:
        super().__init__(
            wallet_id,
            f"Wallet {wallet_id} is not properly configured. "
            "Update the wallets section with valid keys.",
        )
