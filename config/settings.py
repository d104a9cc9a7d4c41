"""
config/settings.py
──────────────────
Engine configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    # Connectivity monitor
    STALENESS_THRESHOLD_S: float = float(os.getenv("STALENESS_THRESHOLD_S", "15"))
    POLL_INTERVAL_S: float = float(os.getenv("POLL_INTERVAL_S", "5"))

    # Analytics
    DEFAULT_WINDOW: str = os.getenv("DEFAULT_WINDOW", "24h")

    # Simulation
    SIMULATION_SEED: int = int(os.getenv("SIMULATION_SEED", "42"))
    DEMO_DURATION_S: float = float(os.getenv("DEMO_DURATION_S", "45"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def validate(self) -> "Settings":
        if self.POLL_INTERVAL_S <= 0:
            raise ValueError("POLL_INTERVAL_S must be positive")
        if self.POLL_INTERVAL_S >= self.STALENESS_THRESHOLD_S:
            raise ValueError(
                f"POLL_INTERVAL_S ({self.POLL_INTERVAL_S}) must be below "
                f"STALENESS_THRESHOLD_S ({self.STALENESS_THRESHOLD_S})"
            )
        return self


settings = Settings()
