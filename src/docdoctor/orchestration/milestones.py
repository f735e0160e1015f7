"""
Milestone tracking - phase timings for orchestration traces.

The orchestrator records a milestone at the start and end of each phase
(discovery, assignment, tool execution) under the plan's trace id. The
tracker turns those events into phase durations and aggregate statistics
for bottleneck analysis.

Traces are kept in insertion order and bounded by ``max_traces``; when a new
trace would exceed the bound, the oldest traces are evicted.

Examples:
    >>> tracker = MilestoneTracker()
    >>> _ = tracker.record("orch-1", Milestone.DISCOVERY_START)
    >>> _ = tracker.record("orch-1", Milestone.DISCOVERY_COMPLETE, {"task_count": 3})
    >>> tracker.get_timings("orch-1").discovery_ms >= 0
    True
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any

from docdoctor.core.logging import get_logger
from docdoctor.core.timestamps import Clock, utc_now

logger = get_logger(__name__)


class Milestone(str, Enum):
    """Workflow milestones recorded per trace."""

    DISCOVERY_START = "discovery-start"
    DISCOVERY_COMPLETE = "discovery-complete"
    ASSIGNMENT_START = "assignment-start"
    ASSIGNMENT_COMPLETE = "assignment-complete"
    TOOL_EXECUTION_START = "tool-execution-start"
    TOOL_EXECUTION_COMPLETE = "tool-execution-complete"


@dataclass(frozen=True)
class MilestoneEvent:
    trace_id: str
    milestone: Milestone
    timestamp: datetime
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MilestoneTimings:
    """Phase durations in milliseconds; None when a phase was not recorded."""

    discovery_ms: float | None = None
    assignment_ms: float | None = None
    tool_execution_ms: float | None = None
    total_ms: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TimingStatistics:
    count: int
    avg_ms: float
    min_ms: float
    max_ms: float
    p50_ms: float
    p95_ms: float


_PHASES: dict[str, tuple[Milestone, Milestone]] = {
    "discovery_ms": (Milestone.DISCOVERY_START, Milestone.DISCOVERY_COMPLETE),
    "assignment_ms": (Milestone.ASSIGNMENT_START, Milestone.ASSIGNMENT_COMPLETE),
    "tool_execution_ms": (Milestone.TOOL_EXECUTION_START, Milestone.TOOL_EXECUTION_COMPLETE),
}


def _elapsed_ms(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() * 1000


class MilestoneTracker:
    """Records milestone events per trace and derives phase timings."""

    def __init__(self, max_traces: int = 100, clock: Clock | None = None):
        self.max_traces = max_traces
        self._clock = clock or utc_now
        self._events: dict[str, list[MilestoneEvent]] = {}

    def record(
        self,
        trace_id: str,
        milestone: Milestone | str,
        metadata: dict[str, Any] | None = None,
    ) -> MilestoneEvent:
        event = MilestoneEvent(
            trace_id=trace_id,
            milestone=Milestone(milestone),
            timestamp=self._clock(),
            metadata=dict(metadata or {}),
        )
        if trace_id not in self._events:
            self._events[trace_id] = []
            self._prune()
        self._events[trace_id].append(event)

        logger.debug(
            "milestone_recorded",
            trace_id=trace_id,
            milestone=event.milestone.value,
            metadata=event.metadata,
        )
        return event

    def get_events(self, trace_id: str) -> list[MilestoneEvent]:
        return list(self._events.get(trace_id, []))

    def get_timings(self, trace_id: str) -> MilestoneTimings:
        """Phase durations for one trace.

        When a milestone was recorded more than once, the latest occurrence
        counts. ``total_ms`` spans the first to the last event of the trace.
        """
        events = self._events.get(trace_id)
        if not events:
            return MilestoneTimings()

        latest = {event.milestone: event.timestamp for event in events}
        durations: dict[str, float | None] = {}
        for name, (start, end) in _PHASES.items():
            if start in latest and end in latest:
                durations[name] = _elapsed_ms(latest[start], latest[end])
            else:
                durations[name] = None

        return MilestoneTimings(
            total_ms=_elapsed_ms(events[0].timestamp, events[-1].timestamp),
            **durations,
        )

    def get_statistics(self, metric: str) -> TimingStatistics | None:
        """Aggregate one timing field (e.g. ``"discovery_ms"``) across traces."""
        values = sorted(
            value
            for trace_id in self._events
            if (value := getattr(self.get_timings(trace_id), metric)) is not None
        )
        if not values:
            return None

        return TimingStatistics(
            count=len(values),
            avg_ms=sum(values) / len(values),
            min_ms=values[0],
            max_ms=values[-1],
            p50_ms=_percentile(values, 50),
            p95_ms=_percentile(values, 95),
        )

    def get_summary(self) -> dict[str, TimingStatistics | None]:
        return {f.name: self.get_statistics(f.name) for f in fields(MilestoneTimings)}

    @property
    def trace_count(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        self._events.clear()

    def _prune(self) -> None:
        excess = len(self._events) - self.max_traces
        if excess > 0:
            for trace_id in list(self._events)[:excess]:
                del self._events[trace_id]


def _percentile(sorted_values: list[float], p: int) -> float:
    index = math.ceil(p / 100 * len(sorted_values)) - 1
    return sorted_values[max(0, index)]


__all__ = [
    "Milestone",
    "MilestoneEvent",
    "MilestoneTimings",
    "TimingStatistics",
    "MilestoneTracker",
]
