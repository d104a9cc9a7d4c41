"""
config/channels.py
──────────────────
Sensor channel definitions and agronomic threshold bands.

Band layout for every channel (value axis):
  < critical_min            → Critical (low)
  < optimal_min             → Warning  (low)
  optimal_min..optimal_max  → Optimal
  > optimal_max             → Warning  (high)
  > critical_max            → Critical (high)
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class ChannelConfig:
    """Static configuration for one monitored sensor channel."""
    key: str
    label: str
    unit: str
    optimal_min: float
    optimal_max: float
    critical_min: float
    critical_max: float
    nominal: float         # typical live value, seeds the simulator
    description: str = ""

    def __post_init__(self) -> None:
        if not (self.critical_min <= self.optimal_min <= self.optimal_max <= self.critical_max):
            raise ValueError(
                f"{self.key}: bands must satisfy critical_min <= optimal_min "
                f"<= optimal_max <= critical_max"
            )


# ── Channels ──────────────────────────────────────────────────────────────────
TEMPERATURE = ChannelConfig(
    key="temperature",
    label="Temperature",
    unit="°C",
    optimal_min=18,
    optimal_max=28,
    critical_min=10,
    critical_max=38,
    nominal=24.3,
    description=(
        "Air and soil temperature drives metabolic rates, enzymatic activity, and nutrient uptake. "
        "Consistent temperatures between 18–28°C support vigorous tomato growth and fruit development."
    ),
)

HUMIDITY = ChannelConfig(
    key="humidity",
    label="Relative Humidity",
    unit="%",
    optimal_min=55,
    optimal_max=80,
    critical_min=30,
    critical_max=95,
    nominal=68.5,
    description=(
        "Relative humidity controls transpiration and pathogen pressure. Levels above 85% for extended "
        "periods create fungal disease conditions. Below 40% forces stomatal closure."
    ),
)

MOISTURE = ChannelConfig(
    key="moisture",
    label="Soil Moisture",
    unit="%",
    optimal_min=40,
    optimal_max=70,
    critical_min=20,
    critical_max=85,
    nominal=58.2,
    description=(
        "Volumetric water content in the root zone determines nutrient availability and oxygen access. "
        "Field capacity is 40–60% for loamy soil. Below 25% triggers wilting stress."
    ),
)

PH = ChannelConfig(
    key="ph",
    label="Soil pH",
    unit="pH",
    optimal_min=6.0,
    optimal_max=7.0,
    critical_min=4.5,
    critical_max=8.5,
    nominal=6.4,
    description=(
        "Soil pH governs nutrient solubility and microbial activity. Most macronutrients are available "
        "at pH 6–7. Below 5.5 causes aluminium toxicity; above 7.5 locks out iron and manganese."
    ),
)

# ── Channel registry ──────────────────────────────────────────────────────────
CHANNEL_CONFIG: dict[str, ChannelConfig] = {
    c.key: c for c in (TEMPERATURE, HUMIDITY, MOISTURE, PH)
}

CHANNEL_KEYS = list(CHANNEL_CONFIG.keys())

# ── Time windows ──────────────────────────────────────────────────────────────
# window key → hours of history requested from the store
TIME_WINDOWS: dict[str, int] = {
    "6h": 6,
    "24h": 24,
    "7d": 7 * 24,
    "30d": 30 * 24,
}

# window key → number of synthetic points the simulator produces
WINDOW_POINTS: dict[str, int] = {
    "6h": 24,
    "24h": 48,
    "7d": 84,
    "30d": 120,
}
