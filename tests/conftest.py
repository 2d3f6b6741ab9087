"""
Pytest configuration and shared fixtures for fitrec tests.
"""

from __future__ import annotations

import os

import pytest

from fitrec.services.cache import BoundedCache
from fitrec.services.http import HttpSessionManager
from fitrec.services.rate_limiter import SlidingWindowRateLimiter
from tests.helpers import FakeClock, FakeSession


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> BoundedCache:
    """Bounded cache driven by the fake clock."""
    return BoundedCache(max_size=100, default_ttl=3600, clock=clock)


@pytest.fixture
def limiter(clock: FakeClock) -> SlidingWindowRateLimiter:
    """Catalog-sized limiter driven by the fake clock."""
    return SlidingWindowRateLimiter(per_minute=60, per_day=5000, clock=clock)


@pytest.fixture
def fake_session() -> FakeSession:
    """Fake HTTP session; tests set its handlers."""
    return FakeSession()


@pytest.fixture
def session_manager(fake_session: FakeSession) -> HttpSessionManager:
    """Session manager handing out the fake session."""
    return HttpSessionManager(session_factory=lambda: fake_session)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep developer .env files and FITREC_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("FITREC_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
