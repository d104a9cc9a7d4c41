"""
tests/test_history.py
─────────────────────
Tests for the historical-data collaborator and last-issued-wins delivery.
"""
import threading
from datetime import timedelta

import pandas as pd
import pytest

from agrotelemetry.data.history import (
    LatestRequestGate,
    SimulatedStore,
    WindowedAnalyzer,
    frame_to_series,
    load_series,
    window_hours,
)
from agrotelemetry.data.simulator import UnknownWindowError
from config.channels import HUMIDITY, TEMPERATURE


class FailingStore:
    def fetch(self, channel, hours):
        raise ConnectionError("store unreachable")


class EmptyStore:
    def fetch(self, channel, hours):
        return pd.DataFrame(columns=["timestamp", "value"])


class BlockingStore:
    """Blocks 24h fetches until released; answers everything else at once."""

    def __init__(self, now):
        self.now = now
        self.release = threading.Event()

    def fetch(self, channel, hours):
        if hours == 24:
            self.release.wait(timeout=5)
            value = 99.0
        else:
            value = 22.0
        return pd.DataFrame({"timestamp": [self.now], "value": [value]})


class TestWindowHours:
    def test_known(self):
        assert window_hours("7d") == 168

    def test_unknown(self):
        with pytest.raises(UnknownWindowError):
            window_hours("90d")


class TestFrameToSeries:
    def test_sorts_chronologically(self, now):
        df = pd.DataFrame({
            "timestamp": [now, now - timedelta(hours=2), now - timedelta(hours=1)],
            "value": [3.0, 1.0, 2.0],
        })
        assert [s.value for s in frame_to_series(df)] == [1.0, 2.0, 3.0]

    def test_drops_missing_values(self, now):
        df = pd.DataFrame({"timestamp": [now - timedelta(hours=1), now], "value": [None, 5.0]})
        assert [s.value for s in frame_to_series(df)] == [5.0]


class TestLoadSeries:
    def test_simulated_store(self, now):
        store = SimulatedStore(seed=42, clock=lambda: now)
        series = load_series(store, TEMPERATURE, "24h", 24.3)
        assert len(series) == 48
        assert series[-1].timestamp == now

    def test_failure_becomes_current_value(self, now):
        series = load_series(FailingStore(), TEMPERATURE, "6h", 23.7, now=now)
        assert len(series) == 1
        assert series[0].value == 23.7
        assert series[0].timestamp == now

    def test_empty_becomes_current_value(self, now):
        series = load_series(EmptyStore(), HUMIDITY, "30d", 61.0, now=now)
        assert [s.value for s in series] == [61.0]

    def test_unknown_window_propagates(self):
        with pytest.raises(UnknownWindowError):
            load_series(EmptyStore(), HUMIDITY, "2h", 61.0)


class TestLatestRequestGate:
    def test_newest_token_wins(self):
        gate = LatestRequestGate()
        first = gate.issue("temperature")
        second = gate.issue("temperature")
        assert second > first
        assert not gate.is_current("temperature", first)
        assert gate.is_current("temperature", second)

    def test_channels_are_independent(self):
        gate = LatestRequestGate()
        t = gate.issue("temperature")
        gate.issue("humidity")
        assert gate.is_current("temperature", t)

    def test_deliver_skips_stale(self):
        gate = LatestRequestGate()
        delivered = []
        stale = gate.issue("ph")
        fresh = gate.issue("ph")
        assert not gate.deliver("ph", stale, delivered.append, "old")
        assert gate.deliver("ph", fresh, delivered.append, "new")
        assert delivered == ["new"]

    def test_callback_may_issue_next_request(self):
        gate = LatestRequestGate()
        token = gate.issue("ph")
        reissued = []
        done = threading.Event()

        def deliver():
            gate.deliver("ph", token, lambda analysis: reissued.append(gate.issue("ph")), "result")
            done.set()

        threading.Thread(target=deliver, daemon=True).start()
        assert done.wait(timeout=2)
        assert gate.is_current("ph", reissued[0])

    def test_cancel(self):
        gate = LatestRequestGate()
        token = gate.issue("ph")
        gate.cancel("ph")
        assert not gate.is_current("ph", token)


class TestWindowedAnalyzer:
    def test_stale_fetch_does_not_overwrite_newer(self, now):
        store = BlockingStore(now)
        delivered = []
        with WindowedAnalyzer(store, delivered.append) as analyzer:
            slow = analyzer.request(TEMPERATURE, "24h", 22.0)
            fast = analyzer.request(TEMPERATURE, "6h", 22.0)
            assert fast.result(timeout=5) is not None
            store.release.set()
            assert slow.result(timeout=5) is None

        assert len(delivered) == 1
        assert delivered[0].avg == 22.0

    def test_single_request_delivered(self, now):
        delivered = []
        store = SimulatedStore(seed=42, clock=lambda: now)
        with WindowedAnalyzer(store, delivered.append) as analyzer:
            analysis = analyzer.request(HUMIDITY, "7d", 68.5).result(timeout=5)
        assert delivered == [analysis]
        assert analysis.channel == "humidity"

    def test_failing_callback_is_logged(self, now, caplog):
        def on_analysis(analysis):
            raise RuntimeError("render failed")

        store = SimulatedStore(seed=42, clock=lambda: now)
        with caplog.at_level("ERROR", logger="agrotelemetry.data.history"):
            with WindowedAnalyzer(store, on_analysis) as analyzer:
                analysis = analyzer.request(HUMIDITY, "6h", 68.5).result(timeout=5)

        assert analysis.channel == "humidity"
        assert "Analysis callback" in caplog.text
        assert "render failed" in caplog.text
