"""Shared fixtures: deterministic clock, random source and settings."""

from __future__ import annotations

import random

import pytest

from otp_login.config import Settings
from otp_login.services.analytics import Analytics
from otp_login.services.otp_manager import OtpManager
from otp_login.storage.medium import MemoryStorage
from otp_login.storage.otp_store import OtpStore

START_MS = 1_700_000_000_000
SEED = 1234


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def now_ms(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        otp_expiry_ms=60_000,
        otp_length=6,
        max_attempts=3,
        mode="production",
        analytics_endpoint="",
    )


@pytest.fixture
def medium() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(medium, settings) -> OtpStore:
    return OtpStore(medium, settings)


@pytest.fixture
def analytics(settings) -> Analytics:
    return Analytics(settings=settings)


@pytest.fixture
def manager(store, analytics, settings, clock) -> OtpManager:
    return OtpManager(
        store=store,
        analytics=analytics,
        settings=settings,
        clock=clock,
        rng=random.Random(SEED),
    )
