"""Unit test fixtures: in-memory cache store and a controllable clock."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import aiosqlite
import httpx
import pytest

from kholagy.cache import CacheStore
from kholagy.config import CacheSettings
from kholagy.fetcher import JsonFetcher
from kholagy.orchestrator import CacheOrchestrator

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 7, 6, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture()
async def store() -> AsyncGenerator[CacheStore, None]:
    async with aiosqlite.connect(":memory:") as db:
        cache_store = CacheStore(db)
        await cache_store.init_db()
        yield cache_store


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def orchestrator(store: CacheStore, clock: FakeClock) -> CacheOrchestrator:
    return CacheOrchestrator(store, CacheSettings(), clock=clock)


@pytest.fixture()
async def fetcher() -> AsyncGenerator[JsonFetcher, None]:
    async with httpx.AsyncClient() as client:
        yield JsonFetcher(client)
