"""Health monitor models.

``HealthSnapshot`` is the only record that leaves the process (via
``HealthMonitor.export_snapshots``), so it is a frozen pydantic model and
is validated again on import. Trends, forecasts and vault summaries are
derived on demand and never stored.

Fields
──────
HealthSnapshot
    stub_penalty      : min(stub_count × 0.05, 0.3)
    health            : 0.7 × refinement + 0.3 × (1 − stub_penalty)
    usefulness_margin : refinement − audience gate (gate 0 without audience)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Audience(str, Enum):
    """Who a document is served to; each audience has a refinement gate."""

    PERSONAL = "personal"
    INTERNAL = "internal"
    TRUSTED = "trusted"
    PUBLIC = "public"


AUDIENCE_GATES: dict[Audience, float] = {
    Audience.PERSONAL: 0.50,
    Audience.INTERNAL: 0.70,
    Audience.TRUSTED: 0.80,
    Audience.PUBLIC: 0.90,
}


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class HealthSnapshot(BaseModel):
    """One health measurement of a document at a point in time."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_path: str
    timestamp: datetime
    refinement: float
    stub_penalty: float
    health: float
    stub_count: int = Field(ge=0)
    blocking_stub_count: int = Field(default=0, ge=0)
    audience: Audience | None = None
    usefulness_margin: float


class HealthTrend(BaseModel):
    """Direction and rate of change of a document's health over the trend window."""

    model_config = ConfigDict(frozen=True)

    document_path: str
    snapshot_count: int
    first_snapshot: datetime
    latest_snapshot: datetime
    current_health: float
    health_delta: float
    slope: float = Field(description="Health change per day")
    velocity: float = Field(description="Refinement change per day")
    direction: TrendDirection
    confidence: float


class RefinementForecast(BaseModel):
    """Time to reach the refinement gate of the document's audience."""

    model_config = ConfigDict(frozen=True)

    document_path: str
    current_refinement: float
    target_refinement: float
    gap: float
    current_velocity: float
    estimated_days: int | None = None
    achievable: bool
    risks: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class VaultSummary(BaseModel):
    """Health across every tracked document."""

    model_config = ConfigDict(frozen=True)

    total_documents: int = 0
    avg_health: float = 0.0
    avg_refinement: float = 0.0
    improving_count: int = 0
    declining_count: int = 0
    stable_count: int = 0
    at_risk_documents: list[str] = Field(default_factory=list)


__all__ = [
    "Audience",
    "AUDIENCE_GATES",
    "TrendDirection",
    "HealthSnapshot",
    "HealthTrend",
    "RefinementForecast",
    "VaultSummary",
]
