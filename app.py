"""
app.py
──────
Agro Telemetry Engine — demo entry point.

Startup sequence:
  1. Configure logging from settings
  2. Wire an in-memory reachability source and a heartbeat stream driven by
     a simulated device that uploads every 5 s and then goes silent
  3. Subscribe to connectivity health
  4. Analyze every channel for the default time window
  5. Run until DEMO_DURATION_S elapses, then tear everything down
"""
import logging
import threading
import time

from agrotelemetry.analytics.engine import analyze_many
from agrotelemetry.connectivity.monitor import subscribe_health
from agrotelemetry.connectivity.sources import StateSource, StreamSource
from agrotelemetry.data.history import SimulatedStore, load_series
from agrotelemetry.data.models import HealthStatus
from agrotelemetry.data.simulator import generate_snapshot
from config.channels import CHANNEL_CONFIG
from config.settings import settings

logger = logging.getLogger("agrotelemetry.app")

DEVICE_UPLOAD_INTERVAL_S = 5.0


def simulate_device(heartbeats: StreamSource, stop: threading.Event, silent_after_s: float) -> None:
    """Push a heartbeat every upload interval until `silent_after_s` elapses."""
    started = time.time()
    while not stop.is_set() and time.time() - started < silent_after_s:
        snapshot = generate_snapshot()
        heartbeats.push(snapshot.timestamp)
        stop.wait(DEVICE_UPLOAD_INTERVAL_S)
    logger.info("Simulated device went silent")


def log_health(status: HealthStatus) -> None:
    logger.info("Health: %-13s last sync: %s", status.state.value, status.last_sync)


def run(duration_s: float = settings.DEMO_DURATION_S, window: str = settings.DEFAULT_WINDOW) -> dict:
    settings.validate()

    reachability = StateSource(initial=True, name="transport")
    heartbeats = StreamSource(name="heartbeat")
    stop = threading.Event()

    device = threading.Thread(
        target=simulate_device,
        args=(heartbeats, stop, duration_s / 2),
        name="SimulatedDevice",
        daemon=True,
    )

    unsubscribe = subscribe_health(reachability, heartbeats, log_health)
    try:
        device.start()

        snapshot = generate_snapshot()
        store = SimulatedStore()
        jobs = []
        for key, cfg in CHANNEL_CONFIG.items():
            current = snapshot.value_for(key)
            if current is None:
                current = cfg.nominal
            jobs.append((cfg, load_series(store, cfg, window, current), current))

        analyses = analyze_many(jobs)
        for key, analysis in analyses.items():
            logger.info(
                "%s [%s] avg=%s min=%s max=%s trend=%s (%+.1f%%)",
                key, analysis.status.value, analysis.avg, analysis.min, analysis.max,
                analysis.trend.value, analysis.trend_pct,
            )
            for insight in analysis.insights:
                logger.info("  • %s", insight)
            logger.info("  → %s", analysis.recommendation)

        stop.wait(duration_s)
    finally:
        stop.set()
        unsubscribe()
        device.join(timeout=DEVICE_UPLOAD_INTERVAL_S)

    return analyses


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    run()
