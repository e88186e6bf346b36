"""Shared fixtures for client tests."""

import pytest
import respx

from freshsales_api.client import FreshsalesClient
from freshsales_api.core.config import Settings
from freshsales_api.services.rate_limit import RateLimitConfig, RateLimiter

DOMAIN = "acme.myfreshworks.com"
BASE_URL = f"https://{DOMAIN}"


class FakeClock:
    """Manually advanced clock; ``sleep`` records waits and moves time forward."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_global_respx_router():
    """Drop routes left on respx's global router so they cannot leak between tests."""
    yield
    respx.clear()


@pytest.fixture
def settings(monkeypatch) -> Settings:
    for var in ("FRESHSALES_DOMAIN", "FRESHSALES_APIKEY", "FRESHSALES_RATE_LIMIT_ENABLED"):
        monkeypatch.delenv(var, raising=False)
    return Settings(_env_file=None, domain=DOMAIN, apikey="secret")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(settings, clock):
    client = FreshsalesClient(settings=settings)
    client.rate_limiter = RateLimiter(
        RateLimitConfig(cycle_ms=500, buffer_ms=100), clock=clock, sleep=clock.sleep
    )
    yield client
    client.close()
