"""
Doc Doctor Health - composite health scores, trends and audience-gate forecasts.

MODULE MAP
──────────
1. models.py   ─ Audience gates + pydantic snapshot/trend/forecast models
2. monitor.py  ─ HealthMonitor and the pure scoring helpers
"""

from docdoctor.health.models import (
    AUDIENCE_GATES,
    Audience,
    HealthSnapshot,
    HealthTrend,
    RefinementForecast,
    TrendDirection,
    VaultSummary,
)
from docdoctor.health.monitor import (
    HealthMonitor,
    audience_gate,
    calculate_health,
    calculate_stub_penalty,
    calculate_usefulness_margin,
    meets_audience_gate,
)

__all__ = [
    "Audience",
    "AUDIENCE_GATES",
    "TrendDirection",
    "HealthSnapshot",
    "HealthTrend",
    "RefinementForecast",
    "VaultSummary",
    "HealthMonitor",
    "audience_gate",
    "calculate_health",
    "calculate_stub_penalty",
    "calculate_usefulness_margin",
    "meets_audience_gate",
]
