"""
Doc Doctor Orchestration - Task discovery, assignment, forecasting and monitored runs.

ARCHITECTURE
────────────
::

    DocumentState (annotations + type vocabulary)
      │
      ▼
    TaskOrchestrator
      ├── discover_tasks()             ─ annotation → DiscoveredTask
      ├── assign_to_families()         ─ policy tables → TaskAssignment
      ├── select_tools()               ─ recommended tools + semantic search
      ├── determine_execution_order()  ─ blocking, tier, priority
      ├── forecast_completion()        ─ sessions, refinement gain, risks
      ├── create_plan()                ─ all of the above → OrchestrationPlan
      └── execute_with_monitoring()    ─ friction, stall detection, results

MODULE MAP
──────────
1. policy.py        ─ vector-family policy tables (static)
2. models.py        ─ dataclasses for annotations, tasks, plans, progress
3. milestones.py    ─ per-trace phase timings
4. orchestrator.py  ─ TaskOrchestrator

``TaskOrchestrator`` is resolved lazily: it depends on
``docdoctor.core.settings``, which itself reads the policy enums from this
package.
"""

from docdoctor.orchestration.milestones import (
    Milestone,
    MilestoneEvent,
    MilestoneTimings,
    MilestoneTracker,
    TimingStatistics,
)
from docdoctor.orchestration.models import (
    Annotation,
    DiscoveredTask,
    DocumentState,
    ExecutionProgress,
    ExecutionResult,
    Forecast,
    FrictionIndicator,
    FrictionType,
    OrchestrationPlan,
    StubForm,
    StubTypeDefinition,
    TaskAssignment,
    TaskLocation,
    TaskOutcome,
    TaskResult,
    TraceContext,
)
from docdoctor.orchestration.policy import (
    ReliabilityTier,
    ReviewPattern,
    TaskFamily,
    ToolUsePolicy,
    VectorFamily,
)

_LAZY_IMPORTS = {
    "TaskOrchestrator": "docdoctor.orchestration.orchestrator",
    "TaskExecutor": "docdoctor.orchestration.orchestrator",
    "ProgressCallback": "docdoctor.orchestration.orchestrator",
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        import importlib

        module = importlib.import_module(_LAZY_IMPORTS[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Policy
    "VectorFamily",
    "ReliabilityTier",
    "ReviewPattern",
    "TaskFamily",
    "ToolUsePolicy",
    # Models
    "StubForm",
    "Annotation",
    "StubTypeDefinition",
    "DocumentState",
    "TaskLocation",
    "DiscoveredTask",
    "TaskAssignment",
    "Forecast",
    "TraceContext",
    "OrchestrationPlan",
    "FrictionType",
    "FrictionIndicator",
    "TaskOutcome",
    "ExecutionProgress",
    "TaskResult",
    "ExecutionResult",
    # Milestones
    "Milestone",
    "MilestoneEvent",
    "MilestoneTimings",
    "TimingStatistics",
    "MilestoneTracker",
    # Orchestrator
    "TaskOrchestrator",
    "TaskExecutor",
    "ProgressCallback",
]
