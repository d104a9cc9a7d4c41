"""
agrotelemetry/data/models.py
────────────────────────────
Pydantic v2 data models for telemetry samples, health verdicts and analyses.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

NO_CONNECTION_LABEL = "No connection"
NEVER_LABEL = "Never"


class HealthState(str, Enum):
    NO_CONNECTION = "no_connection"
    OFFLINE = "offline"
    ONLINE = "online"


class SensorStatus(str, Enum):
    OPTIMAL = "optimal"
    WARNING = "warning"
    CRITICAL = "critical"


class Trend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class BreachDirection(str, Enum):
    LOW = "low"
    HIGH = "high"


class HealthStatus(BaseModel):
    """Connectivity verdict for the device, superseded on every evaluation."""
    model_config = ConfigDict(frozen=True)

    state: HealthState
    last_sync: str

    @model_validator(mode="after")
    def _no_connection_label(self) -> "HealthStatus":
        if self.state == HealthState.NO_CONNECTION and self.last_sync != NO_CONNECTION_LABEL:
            raise ValueError(f"no_connection verdict must read '{NO_CONNECTION_LABEL}'")
        return self


class Sample(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    value: float


class Analysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel: str
    status: SensorStatus
    trend: Trend
    trend_pct: float
    avg: float
    min: float
    max: float
    insights: tuple[str, str, str]
    recommendation: str


class SensorSnapshot(BaseModel):
    """One realtime payload written by the device."""
    temperature: float = 0.0
    humidity: float = 0.0
    moisture: float = 0.0
    timestamp: float | None = None  # device-written Unix seconds (heartbeat)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SensorSnapshot":
        """
        Build a snapshot from the raw device document.

        The device reports soil moisture as ``soilMoisture``; missing or null
        readings are treated as 0.
        """
        return cls(
            temperature=payload.get("temperature") or 0.0,
            humidity=payload.get("humidity") or 0.0,
            moisture=payload.get("soilMoisture") or 0.0,
            timestamp=payload.get("timestamp"),
        )

    def value_for(self, channel: str) -> float | None:
        """Live value for a channel, or None when the device does not report it (pH)."""
        if channel not in ("temperature", "humidity", "moisture"):
            return None
        return float(getattr(self, channel))
