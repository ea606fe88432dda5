"""
Shared pytest fixtures for the fund_lib test suite.

Provides synthetic NAV series, a pinned clock and an in-memory fake of
the Eastmoney client so analytics, cache, batch and API tests run
without the network or Redis.
"""

import os

# Keep every test on the in-memory store even if REDIS_URL is exported.
os.environ.setdefault("DISABLE_REDIS", "1")

from datetime import datetime  # noqa: E402
from zoneinfo import ZoneInfo  # noqa: E402

import numpy as np  # noqa: E402
import pytest  # noqa: E402

from fund_lib.core.cache import MemoryStore  # noqa: E402
from fund_lib.core.clock import FixedClock  # noqa: E402
from fund_lib.core.config import Settings  # noqa: E402
from fund_lib.core.errors import UpstreamFetchError  # noqa: E402
from fund_lib.core.models import FundEstimate, PreviousDayChange, RawPoint  # noqa: E402
from fund_lib.services.analysis_cache import AnalysisCache  # noqa: E402
from fund_lib.services.tracker import FundTracker  # noqa: E402

SH = ZoneInfo("Asia/Shanghai")
DAY_MS = 86_400_000
T0 = int(datetime(2024, 1, 2, 15, 0, tzinfo=SH).timestamp() * 1000)
NOW = datetime(2025, 6, 3, 14, 30, tzinfo=SH)


# ---------------------------------------------------------------------------
# Synthetic data generators
# ---------------------------------------------------------------------------


def _series(values, start: int = T0, step_days: int = 1) -> list[RawPoint]:
    """Daily points with the given values, one per *step_days*."""
    return [RawPoint(start + i * step_days * DAY_MS, float(v)) for i, v in enumerate(values)]


def _random_walk(
    n: int = 300,
    start_value: float = 1.5,
    drift: float = 0.0,
    volatility: float = 0.01,
    seed: int = 42,
    end: datetime = NOW,
) -> list[RawPoint]:
    """Geometric random-walk NAV series ending one day before *end*."""
    rng = np.random.default_rng(seed)
    values = start_value * np.exp(np.cumsum(rng.normal(drift, volatility, n)))
    last = int(end.timestamp() * 1000) - DAY_MS
    return _series(values, start=last - (n - 1) * DAY_MS)


class FakeEastmoneyClient:
    """In-memory stand-in for ``EastmoneyClient``.

    Codes in *failing* raise ``UpstreamFetchError`` from every method.
    ``calls`` counts invocations per (method, code).
    """

    def __init__(self, histories=None, names=None, failing=()):
        self.histories = histories or {}
        self.names = names or {}
        self.failing = set(failing)
        self.calls: dict[tuple[str, str], int] = {}
        self.closed = False

    def _hit(self, method: str, code: str) -> None:
        self.calls[(method, code)] = self.calls.get((method, code), 0) + 1
        if code in self.failing:
            raise UpstreamFetchError(code, "simulated outage")

    async def fetch_fund_info(self, code):
        self._hit("info", code)
        if code not in self.names:
            raise UpstreamFetchError(code, "invalid estimate payload")
        return FundEstimate(
            code=code,
            name=self.names[code],
            nav=1.2345,
            nav_date="2025-06-02",
            est_change=0.56,
            est_time="2025-06-03 14:30",
            valuation=1.2414,
        )

    async def fetch_raw_series(self, code):
        self._hit("history", code)
        return list(self.histories.get(code, []))

    async def fetch_previous_day_change(self, code):
        self._hit("prev", code)
        if code not in self.histories:
            return None
        return PreviousDayChange(code=code, prev_date="2025-06-02", prev_change=-0.34)

    async def aclose(self):
        self.closed = True


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_series():
    """Factory: ``make_series([1.0, 1.1, ...], step_days=1)``."""
    return _series


@pytest.fixture()
def nav_series() -> list[RawPoint]:
    """300 daily points of a driftless random walk around 1.5."""
    return _random_walk(n=300, seed=42)


@pytest.fixture()
def rising_series() -> list[RawPoint]:
    """200 daily points with a strong upward drift."""
    return _random_walk(n=200, drift=0.004, volatility=0.002, seed=7)


@pytest.fixture()
def falling_series() -> list[RawPoint]:
    """200 daily points with a strong downward drift."""
    return _random_walk(n=200, drift=-0.004, volatility=0.002, seed=8)


@pytest.fixture()
def fixed_clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def settings() -> Settings:
    """Default settings without pacing delay so batch tests run instantly."""
    return Settings(batch_delay=0.0, disable_redis=True)


@pytest.fixture()
def fake_client(rising_series, falling_series, nav_series) -> FakeEastmoneyClient:
    return FakeEastmoneyClient(
        histories={
            "000001": rising_series,
            "000002": falling_series,
            "000003": nav_series,
            "000004": [],
        },
        names={"000001": "Growth Fund A", "000002": "Bond Fund C", "000003": "Index Fund"},
        failing={"999999"},
    )


@pytest.fixture()
def tracker(fake_client, settings, fixed_clock) -> FundTracker:
    cache = AnalysisCache(MemoryStore(), fake_client.fetch_raw_series, fixed_clock)
    return FundTracker(fake_client, cache, settings, fixed_clock)
