"""
agrotelemetry/analytics/engine.py
─────────────────────────────────
Sensor analytics: statistics, trend, status and narrative for one channel.

Pipeline for analyze(config, series, current_value):
  1. avg / min / max over the series                   (2 dp)
  2. trend_pct = (mean(2nd half) - mean(1st half)) / mean(1st half) × 100
     split at floor(n / 2); > +1.5 rising, < -1.5 falling    (1 dp)
  3. status from the *current* value against the channel bands
  4. three insights: variance, trend, status
  5. recommendation keyed by (channel, status, breach direction)

A first-half mean of 0 (or a one-sample series) gives trend_pct = 0.0 and
a zero average gives variance_pct = 0.0; both read as stable.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from decimal import ROUND_HALF_UP, Decimal

import numpy as np

from agrotelemetry.analytics.recommendations import select_recommendation
from agrotelemetry.data.models import Analysis, Sample, SensorStatus, Trend
from config.channels import ChannelConfig

logger = logging.getLogger(__name__)

TREND_THRESHOLD_PCT = 1.5
HIGH_VARIANCE_PCT = 20.0


class EmptySeriesError(ValueError):
    """Raised when analysis is requested for a series with no samples."""


def round_half_up(value: float, places: int) -> float:
    """
    Round the exact binary value of `value`, ties away from zero.

    Matches the dashboard's toFixed(): 0.25 -> 0.3 and 10.125 -> 10.13, where
    round() would give 0.2 and 10.12.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def fmt(value: float) -> str:
    """Render a number the way the dashboard shows it: 18 not 18.0, 24.3 as is."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


# ── Classification ────────────────────────────────────────────────────────────


def classify_status(config: ChannelConfig, value: float) -> SensorStatus:
    if value < config.critical_min or value > config.critical_max:
        return SensorStatus.CRITICAL
    if value < config.optimal_min or value > config.optimal_max:
        return SensorStatus.WARNING
    return SensorStatus.OPTIMAL


def classify_trend(trend_pct: float) -> Trend:
    if trend_pct > TREND_THRESHOLD_PCT:
        return Trend.RISING
    if trend_pct < -TREND_THRESHOLD_PCT:
        return Trend.FALLING
    return Trend.STABLE


def compute_trend_pct(values: np.ndarray) -> float:
    """Percent change between first-half and second-half means (1 dp)."""
    half = len(values) // 2
    if half == 0:
        return 0.0
    first = float(values[:half].mean())
    second = float(values[half:].mean())
    if first == 0.0:
        return 0.0
    return round_half_up((second - first) / first * 100.0, 1)


# ── Narratives ────────────────────────────────────────────────────────────────


def _variance_insight(config: ChannelConfig, avg: float, lo: float, hi: float) -> str:
    spread = hi - lo
    variance_pct = round_half_up(spread / avg * 100.0, 1) if avg != 0 else 0.0
    half_spread = round_half_up(spread / 2, 1)
    if variance_pct > HIGH_VARIANCE_PCT:
        return (
            f"High variance detected — readings swing ±{half_spread:.1f}{config.unit}, "
            f"suggesting environmental instability or sensor noise."
        )
    return (
        f"Readings are stable with low variance (±{half_spread:.1f}{config.unit}) "
        f"— conditions are consistent."
    )


def _trend_insight(config: ChannelConfig, trend: Trend, trend_pct: float, avg: float) -> str:
    if trend == Trend.RISING:
        return (
            f"Upward trend of +{fmt(abs(trend_pct))}% over the period. Watch for approach "
            f"toward the {fmt(config.optimal_max)}{config.unit} upper threshold."
        )
    if trend == Trend.FALLING:
        return (
            f"Downward trend of {fmt(trend_pct)}% recorded. Continued decline may breach "
            f"the lower optimal of {fmt(config.optimal_min)}{config.unit}."
        )
    return f"No significant directional drift — values are holding steady around {fmt(avg)}{config.unit}."


def _status_insight(config: ChannelConfig, status: SensorStatus, current: float) -> str:
    cur = f"{fmt(current)}{config.unit}"
    if status == SensorStatus.OPTIMAL:
        return (
            f"Current value {cur} sits comfortably within the optimal band "
            f"({fmt(config.optimal_min)}–{fmt(config.optimal_max)}{config.unit}). "
            f"No corrective action needed."
        )
    if status == SensorStatus.WARNING:
        return f"Current value {cur} is outside optimal range — conditions are suboptimal but manageable."
    return f"Current value {cur} has crossed a critical threshold. Immediate action required."


# ── Main API ──────────────────────────────────────────────────────────────────


def analyze(config: ChannelConfig, series: Sequence[Sample], current_value: float) -> Analysis:
    """
    Analyze a chronological series for one channel.

    Args:
        config: Channel bands and unit
        series: Non-empty, chronologically ordered samples
        current_value: Live reading; drives the status verdict

    Returns:
        Analysis (pure function of its inputs)
    """
    if not series:
        raise EmptySeriesError(f"{config.key}: cannot analyze an empty series")

    values = np.fromiter((s.value for s in series), dtype=float, count=len(series))
    avg = round_half_up(values.mean(), 2)
    lo = round_half_up(values.min(), 2)
    hi = round_half_up(values.max(), 2)

    trend_pct = compute_trend_pct(values)
    trend = classify_trend(trend_pct)
    current_value = float(current_value)
    status = classify_status(config, current_value)

    insights = (
        _variance_insight(config, avg, lo, hi),
        _trend_insight(config, trend, trend_pct, avg),
        _status_insight(config, status, current_value),
    )

    return Analysis(
        channel=config.key,
        status=status,
        trend=trend,
        trend_pct=trend_pct,
        avg=avg,
        min=lo,
        max=hi,
        insights=insights,
        recommendation=select_recommendation(config, status, current_value),
    )


def analyze_many(
    jobs: Iterable[tuple[ChannelConfig, Sequence[Sample], float]],
    max_workers: int = 4,
) -> dict[str, Analysis]:
    """Analyze several channels in parallel; results keyed by channel."""
    jobs = list(jobs)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analytics") as pool:
        results = list(pool.map(lambda job: analyze(*job), jobs))
    logger.debug("Analyzed %d channels", len(results))
    return {a.channel: a for a in results}

