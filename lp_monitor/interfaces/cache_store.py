"""Cache store protocol: optional key/value store for snapshots."""
from typing import Any, Protocol


class CacheStore(Protocol):
    """Abstract interface for a TTL key/value store."""

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None: ...

    async def get(self, key: str) -> Any | None: ...

    async def keys(self, prefix: str = "") -> list[str]: ...
