"""In-process TTL key/value store."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class _Entry:
    value: Any
    expires_at: float


class InMemoryCacheStore:
    """Dictionary-backed cache store with per-key expiry.

    Args:
        clock: Time source in epoch seconds, injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        async with self._lock:
            self._entries[key] = _Entry(value, self._clock() + ttl_seconds)

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    async def keys(self, prefix: str = "") -> list[str]:
        """Live keys starting with ``prefix``."""
        now = self._clock()
        async with self._lock:
            return [
                k
                for k, e in self._entries.items()
                if k.startswith(prefix) and e.expires_at > now
            ]

    async def purge_expired(self) -> int:
        """Remove expired entries; returns how many were dropped."""
        now = self._clock()
        async with self._lock:
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)
