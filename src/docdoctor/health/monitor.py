"""
Health Monitor - composite document health, trends and time-to-target forecasts.

Manifesto:
    Refinement alone overstates a document that is still full of open
    stubs. Health blends both signals and the monitor tracks how that blend
    moves over time:

    - **Score:** ``health = 0.7 × refinement + 0.3 × (1 − stub_penalty)``
    - **Gate:** each audience needs a minimum refinement
    - **Trend:** first-to-last slope over a trailing window
    - **Forecast:** days until the audience gate at the current velocity

    Insufficient data is an answer, not an error: trends and forecasts
    return ``None`` when the history is too short or absent.

Architecture:
    ::

        record_snapshot(path, refinement, stub_count, ...)
              │
              ▼
        per-document history (FIFO, max_snapshots)
              │
              ├── analyze_trend(path)            ─ window, slope, velocity, confidence
              ├── forecast_days_to_target(path)  ─ gap / velocity, risks
              ├── get_vault_summary()            ─ averages, directions, at-risk
              └── export_snapshots() / import_snapshots()

Examples:
    >>> monitor = HealthMonitor()
    >>> snap = monitor.record_snapshot("notes/a.md", refinement=0.8, stub_count=4)
    >>> round(snap.health, 2)
    0.8

Tags:
    health, trend, forecast, refinement, docdoctor

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
from collections import deque
from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from docdoctor.core.errors import ParseError
from docdoctor.core.logging import get_logger
from docdoctor.core.settings import HealthMonitorSettings
from docdoctor.core.timestamps import Clock, generate_id, utc_now
from docdoctor.health.models import (
    AUDIENCE_GATES,
    Audience,
    HealthSnapshot,
    HealthTrend,
    RefinementForecast,
    TrendDirection,
    VaultSummary,
)

logger = get_logger(__name__)

REFINEMENT_WEIGHT = 0.7
STUB_WEIGHT = 0.3
STUB_PENALTY_PER_STUB = 0.05
MAX_STUB_PENALTY = 0.3

# Consecutive steps smaller than this count as consistent with any direction
STEP_NOISE = 0.01
VELOCITY_EPSILON = 0.001
MAX_ACHIEVABLE_DAYS = 365
LONG_TIMELINE_DAYS = 90
SIGNIFICANT_GAP = 0.3
HIGH_STUB_COUNT = 10
AT_RISK_HEALTH = 0.4


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def calculate_stub_penalty(stub_count: int) -> float:
    return min(stub_count * STUB_PENALTY_PER_STUB, MAX_STUB_PENALTY)


def calculate_health(refinement: float, stub_count: int) -> float:
    """Composite health; ``calculate_health(0.8, 4) == 0.8``."""
    return REFINEMENT_WEIGHT * refinement + STUB_WEIGHT * (1 - calculate_stub_penalty(stub_count))


def audience_gate(audience: Audience | str | None) -> float:
    """Refinement gate for an audience; 0 when no audience is set."""
    if audience is None:
        return 0.0
    return AUDIENCE_GATES[Audience(audience)]


def calculate_usefulness_margin(refinement: float, audience: Audience | str | None) -> float:
    return refinement - audience_gate(audience)


def meets_audience_gate(refinement: float, audience: Audience | str) -> bool:
    return refinement >= audience_gate(audience)


class HealthMonitor:
    """
    Tracks health snapshots per document.

    Args:
        settings: History size and trend knobs
        clock: Time source for snapshot timestamps and the trend window
    """

    def __init__(self, settings: HealthMonitorSettings | None = None, clock: Clock | None = None):
        self.settings = settings or HealthMonitorSettings()
        self._clock = clock or utc_now
        self._snapshots: dict[str, deque[HealthSnapshot]] = {}

    # Pure helpers, exposed on the instance for callers holding only a monitor
    calculate_health = staticmethod(calculate_health)
    calculate_usefulness_margin = staticmethod(calculate_usefulness_margin)
    meets_audience_gate = staticmethod(meets_audience_gate)

    # ── Snapshots ────────────────────────────────────────────────────────

    def record_snapshot(
        self,
        document_path: str,
        refinement: float,
        stub_count: int,
        blocking_stub_count: int = 0,
        audience: Audience | str | None = None,
        timestamp: datetime | None = None,
    ) -> HealthSnapshot:
        """Record a measurement; the oldest snapshot is evicted past ``max_snapshots``."""
        stub_penalty = calculate_stub_penalty(stub_count)
        snapshot = HealthSnapshot(
            id=generate_id("snap", 2),
            document_path=document_path,
            timestamp=timestamp or self._clock(),
            refinement=refinement,
            stub_penalty=stub_penalty,
            health=REFINEMENT_WEIGHT * refinement + STUB_WEIGHT * (1 - stub_penalty),
            stub_count=stub_count,
            blocking_stub_count=blocking_stub_count,
            audience=Audience(audience) if audience is not None else None,
            usefulness_margin=calculate_usefulness_margin(refinement, audience),
        )
        self._history(document_path).append(snapshot)

        logger.debug(
            "snapshot_recorded",
            document_path=document_path,
            health=round(snapshot.health, 3),
            refinement=round(refinement, 3),
            stub_count=stub_count,
        )
        return snapshot

    def _history(self, document_path: str) -> deque[HealthSnapshot]:
        if document_path not in self._snapshots:
            self._snapshots[document_path] = deque(maxlen=self.settings.max_snapshots)
        return self._snapshots[document_path]

    def get_snapshots(self, document_path: str) -> list[HealthSnapshot]:
        return list(self._snapshots.get(document_path, ()))

    def get_latest_snapshot(self, document_path: str) -> HealthSnapshot | None:
        history = self._snapshots.get(document_path)
        return history[-1] if history else None

    def get_snapshots_in_window(self, document_path: str, days: float) -> list[HealthSnapshot]:
        """Snapshots no older than ``days`` before now, in recording order."""
        cutoff = self._clock() - timedelta(days=days)
        return [s for s in self._snapshots.get(document_path, ()) if s.timestamp >= cutoff]

    @property
    def document_paths(self) -> list[str]:
        return list(self._snapshots)

    # ── Trend ────────────────────────────────────────────────────────────

    def analyze_trend(self, document_path: str) -> HealthTrend | None:
        """
        First-to-last trend over the trailing window.

        Returns None with fewer than ``min_snapshots_for_trend`` snapshots in
        the window. The time span is floored at one day.
        """
        snapshots = self.get_snapshots_in_window(document_path, self.settings.trend_window_days)
        if len(snapshots) < self.settings.min_snapshots_for_trend:
            logger.debug(
                "trend_insufficient_data",
                document_path=document_path,
                snapshot_count=len(snapshots),
                required=self.settings.min_snapshots_for_trend,
            )
            return None

        first, latest = snapshots[0], snapshots[-1]
        span_days = max((latest.timestamp - first.timestamp).total_seconds() / 86400, 1.0)

        health_delta = latest.health - first.health
        slope = health_delta / span_days
        velocity = (latest.refinement - first.refinement) / span_days

        if abs(slope) < self.settings.stable_threshold:
            direction = TrendDirection.STABLE
        elif slope > 0:
            direction = TrendDirection.IMPROVING
        else:
            direction = TrendDirection.DECLINING

        density = len(snapshots) / span_days
        consistency = self._consistency(snapshots)
        confidence = min(1.0, 0.5 + density * 0.25 + consistency * 0.25)

        return HealthTrend(
            document_path=document_path,
            snapshot_count=len(snapshots),
            first_snapshot=first.timestamp,
            latest_snapshot=latest.timestamp,
            current_health=latest.health,
            health_delta=health_delta,
            slope=slope,
            velocity=velocity,
            direction=direction,
            confidence=confidence,
        )

    @staticmethod
    def _consistency(snapshots: list[HealthSnapshot]) -> float:
        """Share of consecutive steps moving with the overall direction."""
        if len(snapshots) < 3:
            return 0.5

        overall = _sign(snapshots[-1].health - snapshots[0].health)
        consistent = 0
        for previous, current in zip(snapshots, snapshots[1:]):
            step = current.health - previous.health
            if _sign(step) == overall or abs(step) < STEP_NOISE:
                consistent += 1
        return consistent / (len(snapshots) - 1)

    # ── Forecast ─────────────────────────────────────────────────────────

    def forecast_days_to_target(self, document_path: str) -> RefinementForecast | None:
        """Days until the latest snapshot's audience gate is reached; None without history."""
        latest = self.get_latest_snapshot(document_path)
        if latest is None:
            return None

        trend = self.analyze_trend(document_path)
        audience = latest.audience or Audience.PERSONAL
        target = AUDIENCE_GATES[audience]
        gap = target - latest.refinement
        velocity = trend.velocity if trend is not None else 0.0

        risks: list[str] = []
        recommendations: list[str] = []
        estimated_days: int | None = None
        achievable = False

        if gap <= 0:
            achievable = True
            estimated_days = 0
        elif velocity > VELOCITY_EPSILON:
            estimated_days = math.ceil(gap / velocity)
            achievable = estimated_days < MAX_ACHIEVABLE_DAYS
            if estimated_days > LONG_TIMELINE_DAYS:
                risks.append("Long timeline - consider increasing improvement frequency")
        elif velocity < -VELOCITY_EPSILON:
            risks.append("Document health is declining")
            recommendations.append("Review recent changes and identify quality regression causes")
        else:
            risks.append("No improvement velocity detected")
            recommendations.append("Begin active document development to make progress")

        if gap > SIGNIFICANT_GAP:
            recommendations.append(f"Significant work needed to reach {audience.value} audience gate")
        if latest.blocking_stub_count > 0:
            risks.append(f"{latest.blocking_stub_count} blocking stubs preventing publication")
            recommendations.append("Prioritize resolving blocking stubs")
        if latest.stub_count > HIGH_STUB_COUNT:
            risks.append("High stub count affecting health score")
            recommendations.append("Consider batch-resolving similar stub types")

        return RefinementForecast(
            document_path=document_path,
            current_refinement=latest.refinement,
            target_refinement=target,
            gap=max(0.0, gap),
            current_velocity=velocity,
            estimated_days=estimated_days,
            achievable=achievable,
            risks=risks,
            recommendations=recommendations,
        )

    # ── Aggregates ───────────────────────────────────────────────────────

    def get_vault_summary(self) -> VaultSummary:
        """Averages and trend counts across documents; no trend counts as stable."""
        rows = []
        for path in self._snapshots:
            latest = self.get_latest_snapshot(path)
            if latest is not None:
                rows.append((path, latest, self.analyze_trend(path)))

        if not rows:
            return VaultSummary()

        directions = [trend.direction if trend else TrendDirection.STABLE for _, _, trend in rows]
        return VaultSummary(
            total_documents=len(rows),
            avg_health=sum(latest.health for _, latest, _ in rows) / len(rows),
            avg_refinement=sum(latest.refinement for _, latest, _ in rows) / len(rows),
            improving_count=directions.count(TrendDirection.IMPROVING),
            declining_count=directions.count(TrendDirection.DECLINING),
            stable_count=directions.count(TrendDirection.STABLE),
            at_risk_documents=[
                path
                for (path, latest, _), direction in zip(rows, directions)
                if direction == TrendDirection.DECLINING or latest.health < AT_RISK_HEALTH
            ],
        )

    # ── Persistence ──────────────────────────────────────────────────────

    def export_snapshots(self) -> dict[str, list[dict[str, Any]]]:
        """JSON-safe copy of every document's history."""
        return {
            path: [s.model_dump(mode="json") for s in history]
            for path, history in self._snapshots.items()
        }

    def import_snapshots(self, data: dict[str, list[Any]]) -> None:
        """
        Replace the history of each document present in ``data``.

        Histories longer than ``max_snapshots`` keep their newest entries.

        Raises:
            ParseError: A snapshot entry does not validate
        """
        for path, entries in data.items():
            try:
                snapshots = [HealthSnapshot.model_validate(entry) for entry in entries]
            except PydanticValidationError as exc:
                raise ParseError(
                    f"Invalid health snapshot for {path}: {exc.error_count()} error(s)",
                    cause=exc,
                ).with_context(document_path=path) from exc
            self._snapshots[path] = deque(snapshots, maxlen=self.settings.max_snapshots)

        logger.info("snapshots_imported", documents=len(data))

    def clear(self) -> None:
        self._snapshots.clear()

    def clear_document(self, document_path: str) -> None:
        self._snapshots.pop(document_path, None)


__all__ = [
    "HealthMonitor",
    "calculate_health",
    "calculate_stub_penalty",
    "calculate_usefulness_margin",
    "meets_audience_gate",
    "audience_gate",
]
