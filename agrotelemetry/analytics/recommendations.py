"""
agrotelemetry/analytics/recommendations.py
──────────────────────────────────────────
Selects which recommendation applies to a reading.

The wording lives in config/recommendations.py; this module only decides
which cell of the (channel × status × direction) table is used.
"""
from __future__ import annotations

from agrotelemetry.data.models import BreachDirection, SensorStatus
from config.channels import ChannelConfig
from config.recommendations import RECOMMENDATIONS


def breach_direction(config: ChannelConfig, status: SensorStatus, value: float) -> BreachDirection | None:
    """
    Side of the band a non-optimal value sits on.

    Warning compares against the optimal band, critical against the
    critical band. Optimal readings have no direction.
    """
    if status == SensorStatus.WARNING:
        return BreachDirection.LOW if value < config.optimal_min else BreachDirection.HIGH
    if status == SensorStatus.CRITICAL:
        return BreachDirection.LOW if value < config.critical_min else BreachDirection.HIGH
    return None


def select_recommendation(config: ChannelConfig, status: SensorStatus, value: float) -> str:
    table = RECOMMENDATIONS[config.key]
    direction = breach_direction(config, status, value)
    if direction is None:
        return table[SensorStatus.OPTIMAL.value]
    return table[status.value][direction.value]
