"""
agrotelemetry/data/history.py
─────────────────────────────
Historical-data collaborator and request ordering.

Provides:
  - HistoricalStore   : protocol, fetch(channel, hours) -> DataFrame[timestamp, value]
  - SimulatedStore    : store backed by the synthetic generator
  - load_series()     : fetch → chronological Samples, never empty
  - LatestRequestGate : last-issued-wins token bookkeeping per channel
  - WindowedAnalyzer  : async fetch + analyze that drops superseded results

Thread safety: each gate checks and delivers under its own lock, so a
superseded result can never land after a newer one.
"""
from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime
from typing import Protocol

import pandas as pd

from agrotelemetry.analytics.engine import analyze
from agrotelemetry.data.models import Analysis, Sample
from agrotelemetry.data.simulator import UnknownWindowError, generate_series, to_dataframe
from config.channels import CHANNEL_CONFIG, TIME_WINDOWS, ChannelConfig
from config.settings import settings

logger = logging.getLogger(__name__)


class HistoricalStore(Protocol):
    def fetch(self, channel: str, hours: int) -> pd.DataFrame: ...


def window_hours(window: str) -> int:
    try:
        return TIME_WINDOWS[window]
    except KeyError:
        raise UnknownWindowError(window) from None


class SimulatedStore:
    """Serves synthetic history for any channel and supported window."""

    def __init__(self, seed: int = settings.SIMULATION_SEED, clock: Callable[[], datetime] | None = None):
        self.seed = seed
        self.clock = clock or (lambda: datetime.now(tz=UTC))
        self._windows_by_hours = {hours: key for key, hours in TIME_WINDOWS.items()}

    def fetch(self, channel: str, hours: int) -> pd.DataFrame:
        window = self._windows_by_hours.get(hours)
        if window is None:
            raise UnknownWindowError(f"{hours}h")
        samples = generate_series(
            CHANNEL_CONFIG[channel],
            window,
            now=self.clock(),
            seed=self.seed,
        )
        return to_dataframe(samples)


def frame_to_series(df: pd.DataFrame) -> list[Sample]:
    """Convert a store frame to chronologically ordered Samples."""
    if df is None or df.empty:
        return []
    df = df.dropna(subset=["value"]).copy()
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df = df.sort_values("timestamp", kind="stable")
    return [
        Sample(timestamp=ts.to_pydatetime(), value=float(v))
        for ts, v in zip(df["timestamp"], df["value"], strict=True)
    ]


def load_series(
    store: HistoricalStore,
    config: ChannelConfig,
    window: str,
    current_value: float,
    now: datetime | None = None,
) -> list[Sample]:
    """
    Fetch a channel's history for `window`, ready for analyze().

    A failed fetch counts as empty. An empty result becomes a single
    sample at the current value and time.
    """
    hours = window_hours(window)
    try:
        series = frame_to_series(store.fetch(config.key, hours))
    except Exception as exc:
        logger.warning("History fetch failed for %s (%s): %s", config.key, window, exc)
        series = []

    if not series:
        now = now or datetime.now(tz=UTC)
        logger.info("No history for %s (%s); using current value", config.key, window)
        series = [Sample(timestamp=now, value=float(current_value))]
    return series


class LatestRequestGate:
    """
    Last-issued-wins bookkeeping.

    issue(key) hands out a strictly increasing token and makes it the newest
    for `key`; is_current(key, token) tells whether a result may still be
    delivered.
    """

    def __init__(self):
        # Re-entrant: a delivered callback may issue the next request
        self._lock = threading.RLock()
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    def issue(self, key: str) -> int:
        with self._lock:
            token = next(self._counter)
            self._latest[key] = token
            return token

    def is_current(self, key: str, token: int) -> bool:
        with self._lock:
            return self._latest.get(key) == token

    def deliver(self, key: str, token: int, callback: Callable[[Analysis], None], analysis: Analysis) -> bool:
        """Invoke callback only if `token` is still the newest for `key`."""
        with self._lock:
            if self._latest.get(key) != token:
                return False
            callback(analysis)
            return True

    def cancel(self, key: str) -> None:
        with self._lock:
            self._latest.pop(key, None)


class WindowedAnalyzer:
    """
    Fetch history in the background and deliver analyses in request order.

    When the caller switches window before a previous fetch resolves, the
    older result is discarded instead of overwriting the newer one.
    """

    def __init__(
        self,
        store: HistoricalStore,
        on_analysis: Callable[[Analysis], None],
        max_workers: int = 4,
    ):
        self.store = store
        self.on_analysis = on_analysis
        self.gate = LatestRequestGate()
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="history")

    def request(self, config: ChannelConfig, window: str, current_value: float) -> Future:
        token = self.gate.issue(config.key)
        return self._pool.submit(self._run, token, config, window, current_value)

    def _run(self, token: int, config: ChannelConfig, window: str, current_value: float) -> Analysis | None:
        series = load_series(self.store, config, window, current_value)
        analysis = analyze(config, series, current_value)
        if not self.gate.deliver(config.key, token, self._deliver, analysis):
            logger.debug("Discarding stale %s analysis (request %d, %s)", config.key, token, window)
            return None
        return analysis

    def _deliver(self, analysis: Analysis) -> None:
        try:
            self.on_analysis(analysis)
        except Exception:
            logger.exception("Analysis callback %r failed for %s", self.on_analysis, analysis.channel)

    def close(self) -> None:
        self._pool.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> WindowedAnalyzer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
