"""
Shared fixtures for Sheetbook tests.

Async code is driven with `run_async`; every test gets a fresh
in-memory store so nothing touches disk or the network unless the test
asks for it (SQLite tests use tmp_path).
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from sheetbook.config import AppSettings
from sheetbook.services.storage import (
    InMemoryKeyValueStore,
    StoreReadError,
    StoreWriteError,
)


def run_async(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose reads and/or writes can be switched to fail."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = False):
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StoreReadError(f"read failed: {key}")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StoreWriteError(f"quota exceeded: {key}")
        await super().set(key, value)

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StoreWriteError(f"remove failed: {key}")
        await super().remove(key)


class StepClock:
    """Deterministic clock: each call is one minute after the previous."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 12, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(minutes=1)
        return now


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def flaky_store():
    return FlakyStore()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def app_settings():
    return AppSettings(default_currency="NGN", default_low_stock_threshold="5")
