import os
from typing import Optional

import pytest

from alert_review.cache import InMemoryCache
from alert_review.models.alert import AggregatedAlert

CONFIG_ENV_PREFIXES = ("GOOGLE_", "GMAIL_", "VICTOROPS_", "CACHE_", "REPORT_", "LOG_LEVEL")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables so each test starts from defaults."""
    for key in list(os.environ):
        if key.upper().startswith(CONFIG_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingCache:
    """Cache whose backend is down."""

    def __init__(self):
        self.puts = 0

    def get(self, key: str) -> Optional[str]:
        raise ConnectionError("cache backend unavailable")

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.puts += 1
        raise ConnectionError("cache backend unavailable")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_cache(clock):
    return InMemoryCache(clock=clock)


@pytest.fixture
def failing_cache():
    return FailingCache()


@pytest.fixture
def sample_alerts():
    return [
        AggregatedAlert(label="disk full", count=3),
        AggregatedAlert(label="cpu high", count=1),
    ]
