"""
agrotelemetry/data/simulator.py
───────────────────────────────
Synthetic telemetry generator for the four sensor channels.

Generates:
  - Hourly history for any time window, ending at `now`
  - Channel-specific drift around the nominal value plus uniform noise
  - Realtime device payloads carrying a heartbeat timestamp

Design:
  - Reproducible with SIMULATION_SEED for consistent demos
  - Point counts per window follow config.channels.WINDOW_POINTS
"""
from __future__ import annotations

import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import numpy as np
import pandas as pd

from agrotelemetry.data.models import Sample, SensorSnapshot
from config.channels import CHANNEL_CONFIG, WINDOW_POINTS, ChannelConfig
from config.settings import settings


class UnknownWindowError(KeyError):
    """Raised for a time window key outside 6h / 24h / 7d / 30d."""


# ── Drift profiles ────────────────────────────────────────────────────────────
# (i, total) → offset from the nominal value

DRIFTS: dict[str, Callable[[int, int], float]] = {
    "temperature": lambda i, t: math.sin((i / t) * math.pi * 2) * 3,
    "humidity": lambda i, t: -math.sin((i / t) * math.pi) * 8,
    "moisture": lambda i, t: -((i / t) * 12),
    "ph": lambda i, t: math.cos((i / t) * math.pi) * 0.25,
}

# Half-width of the uniform noise band
NOISE: dict[str, float] = {
    "temperature": 4.5,
    "humidity": 4.5,
    "moisture": 4.5,
    "ph": 0.25,
}


def window_points(window: str) -> int:
    try:
        return WINDOW_POINTS[window]
    except KeyError:
        raise UnknownWindowError(window) from None


# ── Public API ────────────────────────────────────────────────────────────────

def generate_series(
    config: ChannelConfig,
    window: str,
    now: datetime | None = None,
    seed: int = settings.SIMULATION_SEED,
    points: int | None = None,
) -> list[Sample]:
    """
    Generate a chronological series for one channel over a time window.

    One sample per hour, the last one stamped at `now`.
    """
    n = points if points is not None else window_points(window)
    now = now or datetime.now(tz=UTC)
    rng = np.random.default_rng(seed)
    drift = DRIFTS.get(config.key, lambda i, t: 0.0)
    noise = NOISE.get(config.key, 4.5)

    jitter = (rng.random(n) - 0.5) * noise * 2
    samples: list[Sample] = []
    for i in range(n):
        hours_back = n - 1 - i
        value = config.nominal + drift(i, n) + float(jitter[i])
        samples.append(Sample(timestamp=now - timedelta(hours=hours_back), value=round(value, 2)))
    return samples


def generate_snapshot(
    now: datetime | None = None,
    seed: int | None = None,
) -> SensorSnapshot:
    """
    Generate a single realtime device payload.

    Uses a seed based on the current time unless one is given.
    """
    now = now or datetime.now(tz=UTC)
    rng = np.random.default_rng(seed if seed is not None else int(now.timestamp()) % 10_000)

    def reading(key: str) -> float:
        cfg = CHANNEL_CONFIG[key]
        return round(cfg.nominal + float(rng.normal(0, NOISE[key] / 3)), 2)

    return SensorSnapshot.from_payload({
        "temperature": reading("temperature"),
        "humidity": reading("humidity"),
        "soilMoisture": reading("moisture"),
        "timestamp": int(now.timestamp()),
    })


def to_dataframe(samples: list[Sample]) -> pd.DataFrame:
    """Convert a list of Samples to a (timestamp, value) DataFrame."""
    return pd.DataFrame([s.model_dump() for s in samples], columns=["timestamp", "value"])
