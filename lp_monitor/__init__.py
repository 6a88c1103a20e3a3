"""Liquidity position portfolio monitor."""

__version__ = "0.1.0"
