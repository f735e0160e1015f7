"""
Orchestration models - dataclasses for annotations, tasks, plans and runs.

These are plain data structures with no orchestration logic (that lives in
``orchestrator.py``). Records derived from a document are frozen; the only
mutable record is :class:`ExecutionProgress`, which belongs to one
monitored run.

Design Principles:
- Immutable where the lifecycle allows (frozen dataclasses)
- Tolerant input: malformed optional fields fall back to defaults
- ``from_dict`` for YAML/JSON input, ``to_dict`` for serialization
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from docdoctor.core.errors import ValidationError
from docdoctor.core.timestamps import generate_id
from docdoctor.orchestration.policy import (
    ReliabilityTier,
    ReviewPattern,
    TaskFamily,
    ToolUsePolicy,
    VectorFamily,
)


class StubForm(str, Enum):
    """Lifecycle form of an annotation."""

    TRANSIENT = "transient"
    PERSISTENT = "persistent"
    BLOCKING = "blocking"
    STRUCTURAL = "structural"


class FrictionType(str, Enum):
    """Kinds of trouble observed during a monitored run."""

    TOOL_FAILURE = "tool_failure"
    SLOW_PROGRESS = "slow_progress"
    REPEATED_FAILURE = "repeated_failure"
    LOW_QUALITY = "low_quality"
    USER_REJECTION = "user_rejection"


def _coerce_form(value: Any) -> StubForm | None:
    if value is None or isinstance(value, StubForm):
        return value
    try:
        return StubForm(str(value).strip().lower())
    except ValueError:
        return None


# =============================================================================
# Document input
# =============================================================================


@dataclass(frozen=True)
class Annotation:
    """
    A unit of unresolved work embedded in a document (a "stub").

    Attributes:
        id: Stable identifier, unique within the document
        type: Key into the document's stub type vocabulary (e.g. "source")
        description: Free-text description of the work
        form: transient / persistent / blocking / structural; read from
            ``properties["stub_form"]`` when not given
        properties: Arbitrary values, may include priority, urgency,
            impact and complexity
        line_number: Source line, if known
        section: Source section heading, if known
    """

    id: str
    type: str
    description: str = ""
    form: StubForm | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    line_number: int | None = None
    section: str | None = None

    def __post_init__(self):
        form = self.form if self.form is not None else self.properties.get("stub_form")
        object.__setattr__(self, "form", _coerce_form(form))

    @property
    def blocking(self) -> bool:
        return self.form == StubForm.BLOCKING

    def number(self, key: str, default: float = 0.5) -> float:
        """Numeric property with a fallback for missing or non-numeric values."""
        value = self.properties.get(key)
        if value is None or isinstance(value, bool):
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Annotation:
        """Create from dictionary (YAML/JSON deserialization)."""
        line_number = data.get("line_number", data.get("frontmatter_line"))
        return cls(
            id=str(data.get("id") or generate_id("stub")),
            type=str(data["type"]),
            description=data.get("description", ""),
            form=_coerce_form(data.get("form") or data.get("stub_form")),
            properties=dict(data.get("properties") or {}),
            line_number=int(line_number) if line_number is not None else None,
            section=data.get("section"),
        )


@dataclass(frozen=True)
class StubTypeDefinition:
    """One entry of a document's stub type vocabulary."""

    key: str
    display_name: str = ""
    vector_family: VectorFamily | None = None

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any]) -> StubTypeDefinition:
        family = data.get("vector_family") or data.get("vectorFamily")
        return cls(
            key=data.get("key", key),
            display_name=data.get("display_name") or data.get("displayName") or key,
            vector_family=VectorFamily(family) if family else None,
        )


@dataclass(frozen=True)
class DocumentState:
    """
    Snapshot of a document handed to the orchestrator.

    Attributes:
        path: Document path, used as its identity
        title: Document title
        content: Document text
        refinement: Current refinement score in [0, 1]
        origin: How the document came to be (free text)
        form: Document maturity (transient, developing, stable, ...)
        audience: personal / internal / trusted / public
        annotations: Unresolved work items in the document
        stub_types: Type vocabulary, keyed by stub type
    """

    path: str
    title: str = ""
    content: str = ""
    refinement: float = 0.0
    origin: str | None = None
    form: str | None = None
    audience: str | None = None
    annotations: list[Annotation] = field(default_factory=list)
    stub_types: dict[str, StubTypeDefinition] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentState:
        """Create from dictionary; ``existing_stubs`` is accepted for ``annotations``."""
        raw_annotations = data.get("annotations", data.get("existing_stubs")) or []
        raw_types = data.get("stub_types") or {}
        return cls(
            path=str(data["path"]),
            title=data.get("title", ""),
            content=data.get("content", ""),
            refinement=float(data.get("refinement", 0.0)),
            origin=data.get("origin"),
            form=data.get("form"),
            audience=data.get("audience"),
            annotations=[Annotation.from_dict(a) for a in raw_annotations],
            stub_types={
                key: StubTypeDefinition.from_dict(key, value or {})
                for key, value in raw_types.items()
            },
        )


# =============================================================================
# Discovery and assignment
# =============================================================================


@dataclass(frozen=True)
class TaskLocation:
    line_number: int
    section: str | None = None


@dataclass(frozen=True)
class DiscoveredTask:
    """
    A task derived one-to-one from an annotation.

    Attributes:
        id: ``task-<annotation id>``
        stub_type: Annotation type key
        description: Annotation description
        vector_family: Semantic category of the work
        task_family: Classification derived from the vector family
        priority_score: Ordering score in [0, 1]
        potential_energy: urgency × impact × complexity
        blocking: True iff the annotation form is blocking
        annotation: Source annotation
        location: Where the annotation sits in the document
    """

    id: str
    stub_type: str
    description: str
    vector_family: VectorFamily
    task_family: TaskFamily
    priority_score: float
    potential_energy: float
    blocking: bool
    annotation: Annotation | None = None
    location: TaskLocation | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "stub_type": self.stub_type,
            "description": self.description,
            "vector_family": self.vector_family.value,
            "task_family": self.task_family.value,
            "priority_score": self.priority_score,
            "potential_energy": self.potential_energy,
            "blocking": self.blocking,
            "line_number": self.location.line_number if self.location else None,
        }


@dataclass(frozen=True)
class TaskAssignment:
    """Reliability context for a task, looked up from the policy tables."""

    task: DiscoveredTask
    reliability_tier: ReliabilityTier
    review_pattern: ReviewPattern
    recommended_tools: list[str]
    tool_policy: ToolUsePolicy
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task.id,
            "reliability_tier": self.reliability_tier.value,
            "review_pattern": self.review_pattern.value,
            "recommended_tools": list(self.recommended_tools),
            "tool_policy": self.tool_policy.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Forecast:
    """Completion forecast for a set of tasks."""

    total_potential_energy: float
    estimated_velocity: float
    estimated_sessions: int
    refinement_delta_per_session: float
    projected_refinement: float
    confidence: float
    risks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_potential_energy": self.total_potential_energy,
            "estimated_velocity": self.estimated_velocity,
            "estimated_sessions": self.estimated_sessions,
            "refinement_delta_per_session": self.refinement_delta_per_session,
            "projected_refinement": self.projected_refinement,
            "confidence": self.confidence,
            "risks": list(self.risks),
        }


@dataclass(frozen=True)
class TraceContext:
    """Correlation ids for one orchestration."""

    trace_id: str
    span_id: str

    @classmethod
    def new(cls) -> TraceContext:
        return cls(trace_id=generate_id("orch"), span_id=generate_id("span", 2))


@dataclass(frozen=True)
class OrchestrationPlan:
    """
    Everything needed to run one document's improvement session.

    ``execution_order`` lists task ids; every id refers to an entry of
    ``assignments``.
    """

    id: str
    trace_context: TraceContext
    document_state: DocumentState
    tasks: list[DiscoveredTask]
    assignments: list[TaskAssignment]
    execution_order: list[str]
    forecast: Forecast
    created_at: datetime

    def get_assignment(self, task_id: str) -> TaskAssignment | None:
        for assignment in self.assignments:
            if assignment.task.id == task_id:
                return assignment
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "trace_id": self.trace_context.trace_id,
            "document_path": self.document_state.path,
            "tasks": [t.to_dict() for t in self.tasks],
            "assignments": [a.to_dict() for a in self.assignments],
            "execution_order": list(self.execution_order),
            "forecast": self.forecast.to_dict(),
            "created_at": self.created_at.isoformat(),
        }


# =============================================================================
# Execution monitoring
# =============================================================================


@dataclass(frozen=True)
class FrictionIndicator:
    """A severity-scored signal of trouble during a run."""

    type: FrictionType
    severity: int
    message: str
    timestamp: datetime
    task_id: str | None = None

    def __post_init__(self):
        if not 1 <= self.severity <= 5:
            raise ValidationError(
                f"Friction severity must be between 1 and 5, got {self.severity}",
                field="severity",
                value=self.severity,
            )
        if not isinstance(self.type, FrictionType):
            try:
                friction_type = FrictionType(self.type)
            except ValueError as exc:
                raise ValidationError(
                    f"Unknown friction type: {self.type!r}",
                    field="type",
                    value=self.type,
                    cause=exc,
                ) from exc
            object.__setattr__(self, "type", friction_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity,
            "message": self.message,
            "task_id": self.task_id,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class TaskOutcome:
    """A failed or skipped task and why."""

    task_id: str
    reason: str


@dataclass
class ExecutionProgress:
    """
    Mutable progress record for one monitored run.

    Written only by the execution loop (and ``record_friction``); progress
    callbacks receive a :meth:`snapshot`.
    """

    plan_id: str
    started_at: datetime
    last_updated_at: datetime
    current_task_id: str | None = None
    completed_tasks: list[str] = field(default_factory=list)
    failed_tasks: list[TaskOutcome] = field(default_factory=list)
    skipped_tasks: list[TaskOutcome] = field(default_factory=list)
    progress_percent: int = 0
    friction: list[FrictionIndicator] = field(default_factory=list)
    stalled: bool = False

    def snapshot(self) -> ExecutionProgress:
        """Independent copy for observers."""
        return copy.deepcopy(self)

    def recent_friction_severity(self, now: datetime, window_seconds: float) -> int:
        """Sum of severities of friction recorded within ``window_seconds`` of ``now``."""
        return sum(
            f.severity
            for f in self.friction
            if (now - f.timestamp).total_seconds() < window_seconds
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "current_task_id": self.current_task_id,
            "completed_tasks": list(self.completed_tasks),
            "failed_tasks": [{"task_id": o.task_id, "reason": o.reason} for o in self.failed_tasks],
            "skipped_tasks": [{"task_id": o.task_id, "reason": o.reason} for o in self.skipped_tasks],
            "progress_percent": self.progress_percent,
            "friction": [f.to_dict() for f in self.friction],
            "stalled": self.stalled,
            "started_at": self.started_at.isoformat(),
            "last_updated_at": self.last_updated_at.isoformat(),
        }


@dataclass(frozen=True)
class TaskResult:
    """Outcome of one task attempt."""

    task_id: str
    success: bool
    duration_ms: float
    output: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "success": self.success,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


@dataclass
class ExecutionResult:
    """Result of :meth:`TaskOrchestrator.execute_with_monitoring`."""

    plan_id: str
    success: bool
    progress: ExecutionProgress
    task_results: list[TaskResult]
    total_duration_ms: float
    actual_refinement_delta: float
    summary: str

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.task_results if r.success)

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "success": self.success,
            "progress": self.progress.to_dict(),
            "task_results": [r.to_dict() for r in self.task_results],
            "total_duration_ms": self.total_duration_ms,
            "actual_refinement_delta": self.actual_refinement_delta,
            "summary": self.summary,
        }


__all__ = [
    "StubForm",
    "FrictionType",
    "Annotation",
    "StubTypeDefinition",
    "DocumentState",
    "TaskLocation",
    "DiscoveredTask",
    "TaskAssignment",
    "Forecast",
    "TraceContext",
    "OrchestrationPlan",
    "FrictionIndicator",
    "TaskOutcome",
    "ExecutionProgress",
    "TaskResult",
    "ExecutionResult",
]
