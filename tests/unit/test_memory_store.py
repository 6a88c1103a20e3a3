"""Unit tests for the in-memory cache store."""
from __future__ import annotations

from typing import Any

import pytest

from lp_monitor.storage import InMemoryCacheStore


class TestInMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_set_and_get(self, clock: Any) -> None:
        store = InMemoryCacheStore(clock=clock)
        await store.set("portfolio:w1", {"total_value": 1.0}, 300)
        assert await store.get("portfolio:w1") == {"total_value": 1.0}

    @pytest.mark.asyncio
    async def test_missing_key(self, clock: Any) -> None:
        assert await InMemoryCacheStore(clock=clock).get("nope") is None

    @pytest.mark.asyncio
    async def test_expired_entry_hidden(self, clock: Any) -> None:
        store = InMemoryCacheStore(clock=clock)
        await store.set("k", 1, 60)
        clock.advance(60)
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_keys_by_prefix(self, clock: Any) -> None:
        store = InMemoryCacheStore(clock=clock)
        await store.set("archive:w1:2024-05-01", {}, 100)
        await store.set("portfolio:w1", {}, 100)
        assert await store.keys("archive:") == ["archive:w1:2024-05-01"]

    @pytest.mark.asyncio
    async def test_purge_expired(self, clock: Any) -> None:
        store = InMemoryCacheStore(clock=clock)
        await store.set("short", 1, 10)
        await store.set("long", 2, 1000)
        clock.advance(11)
        assert await store.purge_expired() == 1
        assert await store.keys() == ["long"]
