"""Protocol interfaces for the LP portfolio monitor."""
from .cache_store import CacheStore
from .fee_provider import FeeProvider
from .position_provider import PositionProvider, PositionSource
from .price_provider import PriceProvider

__all__ = [
    "CacheStore",
    "FeeProvider",
    "PositionProvider",
    "PositionSource",
    "PriceProvider",
]
