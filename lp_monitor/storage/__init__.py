"""Cache store implementations."""
from .memory import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]
