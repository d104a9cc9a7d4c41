"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the telemetry engine test suite.
"""
import os
from datetime import UTC, datetime

import pytest

os.environ.setdefault("SIMULATION_SEED", "42")
os.environ.setdefault("STALENESS_THRESHOLD_S", "15")
os.environ.setdefault("POLL_INTERVAL_S", "5")


class FakeClock:
    """Manually advanced Unix-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def temperature():
    from config.channels import TEMPERATURE
    return TEMPERATURE


@pytest.fixture
def make_series(now):
    """Build a chronological hourly series from raw values."""
    from datetime import timedelta

    from agrotelemetry.data.models import Sample

    def _make(values):
        n = len(values)
        return [
            Sample(timestamp=now - timedelta(hours=n - 1 - i), value=v)
            for i, v in enumerate(values)
        ]

    return _make


@pytest.fixture
def sources():
    from agrotelemetry.connectivity.sources import StateSource, StreamSource
    return StateSource(initial=True, name="transport"), StreamSource(name="heartbeat")


@pytest.fixture
def monitor(sources, clock):
    from agrotelemetry.connectivity.monitor import ConnectivityStatusMonitor
    reachability, heartbeats = sources
    m = ConnectivityStatusMonitor(
        reachability,
        heartbeats,
        clock=clock,
        poll_interval_s=5,
        staleness_threshold_s=15,
    )
    yield m
    m.stop()
