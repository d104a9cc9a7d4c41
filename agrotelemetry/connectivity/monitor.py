"""
agrotelemetry/connectivity/monitor.py
─────────────────────────────────────
Device connectivity verdict from two independent signals.

  transport reachable?  ──┐
                          ├──► evaluate() ──► HealthStatus ──► subscribers
  device heartbeat age  ──┘
                          ▲
        periodic tick ────┘  (the only path from Online to Offline without events)

Priority:
  1. transport unreachable           → NO_CONNECTION  "No connection"
  2. no heartbeat ever received      → OFFLINE        "Never"
  3. heartbeat age > staleness limit → OFFLINE        "<relative time>"
  4. otherwise                       → ONLINE         "<relative time>"

Every trigger (reachability change, heartbeat, tick) funnels through a
single re-entrant lock, so state updates and emissions are serialized and
nothing is delivered after stop() returns.
"""
from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable

from agrotelemetry.connectivity.relative_time import format_relative
from agrotelemetry.connectivity.sources import EventSource, Unsubscribe
from agrotelemetry.data.models import (
    NEVER_LABEL,
    NO_CONNECTION_LABEL,
    HealthState,
    HealthStatus,
)
from config.settings import settings

logger = logging.getLogger(__name__)

HealthCallback = Callable[[HealthStatus], None]


def evaluate(
    reachable: bool,
    last_heartbeat_at: float | None,
    now: float,
    staleness_threshold: float = settings.STALENESS_THRESHOLD_S,
) -> HealthStatus:
    """Pure decision function: current signals → HealthStatus."""
    if not reachable:
        return HealthStatus(state=HealthState.NO_CONNECTION, last_sync=NO_CONNECTION_LABEL)
    if last_heartbeat_at is None:
        return HealthStatus(state=HealthState.OFFLINE, last_sync=NEVER_LABEL)

    # Whole seconds on our side; heartbeats are device-written Unix seconds
    age = math.floor(now) - last_heartbeat_at
    state = HealthState.OFFLINE if age > staleness_threshold else HealthState.ONLINE
    return HealthStatus(state=state, last_sync=format_relative(last_heartbeat_at, now))


class ConnectivityStatusMonitor:
    """
    Fuses transport reachability and device heartbeats into a HealthStatus.

    The monitor owns two pieces of state (``reachable``, ``last_heartbeat_at``)
    and a timer thread that re-evaluates every ``poll_interval_s`` seconds.
    ``start()``/``stop()`` acquire and release the timer and both source
    subscriptions together; the monitor is also a context manager.
    """

    def __init__(
        self,
        reachability: EventSource | None = None,
        heartbeats: EventSource | None = None,
        clock: Callable[[], float] = time.time,
        poll_interval_s: float = settings.POLL_INTERVAL_S,
        staleness_threshold_s: float = settings.STALENESS_THRESHOLD_S,
    ):
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be positive")
        if poll_interval_s >= staleness_threshold_s:
            raise ValueError(
                f"poll interval ({poll_interval_s}s) must be shorter than the "
                f"staleness threshold ({staleness_threshold_s}s)"
            )

        self.reachability = reachability
        self.heartbeats = heartbeats
        self.clock = clock
        self.poll_interval_s = poll_interval_s
        self.staleness_threshold_s = staleness_threshold_s

        self.reachable = False
        self.last_heartbeat_at: float | None = None
        self.last_status: HealthStatus | None = None

        self._lock = threading.RLock()
        self._subscribers: list[HealthCallback] = []
        self._unsubscribes: list[Unsubscribe] = []
        self._stop_event = threading.Event()
        self._timer_thread: threading.Thread | None = None
        self._running = False

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Subscribe to both sources and start the re-evaluation timer."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._stop_event.clear()

            # Sources may deliver their current value synchronously here
            for source, handler in (
                (self.reachability, self.on_reachability),
                (self.heartbeats, self.on_heartbeat),
            ):
                if source is not None:
                    self._unsubscribes.append(source.subscribe(handler))

            if not self._running:
                # A subscriber called stop() during the initial replay
                self._release_subscriptions()
                return

            self._timer_thread = threading.Thread(
                target=self._timer_loop, name="ConnectivityTimer", daemon=True
            )
            self._timer_thread.start()

        logger.info(
            "Connectivity monitor started (poll=%ss, staleness=%ss)",
            self.poll_interval_s,
            self.staleness_threshold_s,
        )

    def stop(self) -> None:
        """Cancel the timer and both subscriptions. No emissions follow."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
            self._release_subscriptions()
            thread, self._timer_thread = self._timer_thread, None

        # A subscriber may call stop() from inside a tick
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.poll_interval_s + 1.0)

        logger.info("Connectivity monitor stopped")

    def __enter__(self) -> ConnectivityStatusMonitor:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    # ── Subscribers ───────────────────────────────────────────────────────────

    def subscribe_health(self, callback: HealthCallback) -> Unsubscribe:
        """
        Register a callback for every re-evaluation.

        The first subscriber starts the monitor and the last unsubscribe
        stops it. The returned function is idempotent.
        """
        with self._lock:
            self._subscribers.append(callback)
            should_start = not self._running

        if should_start:
            self.start()

        def unsubscribe() -> None:
            with self._lock:
                if callback not in self._subscribers:
                    return
                self._subscribers.remove(callback)
                remaining = len(self._subscribers)
            if remaining == 0:
                self.stop()

        return unsubscribe

    # ── Triggers ──────────────────────────────────────────────────────────────

    def on_reachability(self, reachable: bool) -> None:
        with self._lock:
            self.reachable = reachable is True
            self._emit()

    def on_heartbeat(self, timestamp: float | None) -> None:
        """Record a device heartbeat; ``None`` (field absent) only re-evaluates."""
        with self._lock:
            if timestamp is not None:
                self.last_heartbeat_at = float(timestamp)
            self._emit()

    def tick(self) -> None:
        with self._lock:
            self._emit()

    def current(self) -> HealthStatus:
        """Verdict for the current state, without notifying subscribers."""
        with self._lock:
            return evaluate(
                self.reachable,
                self.last_heartbeat_at,
                self.clock(),
                self.staleness_threshold_s,
            )

    # ── Internals ─────────────────────────────────────────────────────────────

    def _release_subscriptions(self) -> None:
        unsubscribes, self._unsubscribes = self._unsubscribes, []
        for unsubscribe in unsubscribes:
            unsubscribe()

    def _timer_loop(self) -> None:
        while not self._stop_event.wait(self.poll_interval_s):
            self.tick()

    def _emit(self) -> None:
        # Caller holds self._lock
        if not self._running:
            return

        status = self.current()
        previous = self.last_status
        self.last_status = status
        if previous is None or previous.state != status.state:
            logger.info(
                "Device connectivity %s → %s (last sync: %s)",
                previous.state.value if previous else "unknown",
                status.state.value,
                status.last_sync,
            )

        for callback in list(self._subscribers):
            if not self._running:
                break
            if callback not in self._subscribers:
                continue
            try:
                callback(status)
            except Exception:
                logger.exception("Health subscriber %r failed", callback)


def subscribe_health(
    reachability: EventSource,
    heartbeats: EventSource,
    callback: HealthCallback,
    **monitor_kwargs,
) -> Unsubscribe:
    """
    Compose a monitor for a single subscriber.

    Returns one function that tears down the timer and both source
    subscriptions.
    """
    monitor = ConnectivityStatusMonitor(reachability, heartbeats, **monitor_kwargs)
    return monitor.subscribe_health(callback)
