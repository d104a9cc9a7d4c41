"""
tests/test_simulator.py
───────────────────────
Tests for the synthetic telemetry generator.
"""
import pytest

from agrotelemetry.data.simulator import (
    UnknownWindowError,
    generate_series,
    generate_snapshot,
    to_dataframe,
)
from config.channels import CHANNEL_CONFIG, MOISTURE, PH, TEMPERATURE


class TestGenerateSeries:
    @pytest.mark.parametrize("window, expected", [("6h", 24), ("24h", 48), ("7d", 84), ("30d", 120)])
    def test_point_counts(self, now, window, expected):
        assert len(generate_series(TEMPERATURE, window, now=now, seed=42)) == expected

    def test_chronological_and_ends_now(self, now):
        series = generate_series(TEMPERATURE, "24h", now=now, seed=42)
        timestamps = [s.timestamp for s in series]
        assert timestamps == sorted(timestamps)
        assert timestamps[-1] == now

    def test_reproducible(self, now):
        s1 = generate_series(PH, "7d", now=now, seed=7)
        s2 = generate_series(PH, "7d", now=now, seed=7)
        assert [s.value for s in s1] == [s.value for s in s2]

    def test_values_near_nominal(self, now):
        for cfg in CHANNEL_CONFIG.values():
            series = generate_series(cfg, "30d", now=now, seed=42)
            # largest drift (moisture, 12) plus noise band
            margin = (12 + 4.5 if cfg.key != "ph" else 0.25 + 0.25) + 0.01
            assert all(abs(s.value - cfg.nominal) <= margin for s in series)

    def test_moisture_declines(self, now):
        series = generate_series(MOISTURE, "30d", now=now, seed=42)
        values = [s.value for s in series]
        first = sum(values[:60]) / 60
        second = sum(values[60:]) / 60
        assert second < first

    def test_unknown_window(self, now):
        with pytest.raises(UnknownWindowError):
            generate_series(TEMPERATURE, "1y", now=now)
        with pytest.raises(KeyError):
            generate_series(TEMPERATURE, "1y", now=now)


class TestGenerateSnapshot:
    def test_heartbeat_is_now(self, now):
        snap = generate_snapshot(now=now, seed=1)
        assert snap.timestamp == int(now.timestamp())
        assert snap.temperature > 0
        assert snap.moisture > 0


class TestToDataframe:
    def test_columns(self, now):
        df = to_dataframe(generate_series(TEMPERATURE, "6h", now=now, seed=42))
        assert list(df.columns) == ["timestamp", "value"]
        assert len(df) == 24

    def test_empty(self):
        df = to_dataframe([])
        assert df.empty
        assert list(df.columns) == ["timestamp", "value"]
