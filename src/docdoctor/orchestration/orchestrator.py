"""
Task Orchestrator - from document annotations to a monitored improvement run.

Manifesto:
    A document carries its unfinished work as annotations. The orchestrator
    answers four questions about that work:

    - **What** should be done next (discovery + priority ordering)
    - **How much** automation can be trusted with each item (assignment)
    - **When** the work will plausibly finish (forecast)
    - **Is it going well** while it runs (friction + stall detection)

    Each phase is a plain synchronous method so callers can use them on
    their own; ``create_plan`` chains them.

Architecture:
    ::

        DocumentState
             │
             ▼
        discover_tasks()          annotation → DiscoveredTask (family, priority, energy)
             │
             ▼
        assign_to_families()      DiscoveredTask → TaskAssignment (policy tables)
             │
             ├── determine_execution_order()   blocking, tier, priority
             └── forecast_completion()         sessions, refinement gain, risks
             │
             ▼
        OrchestrationPlan  ──► execute_with_monitoring(plan, on_progress)
                                   │
                                   ├── stall check before every task
                                   ├── executor(assignment), timed
                                   └── friction on failure / slow tasks

Examples:
    >>> orchestrator = TaskOrchestrator()
    >>> plan = orchestrator.create_plan(document)
    >>> result = orchestrator.execute_with_monitoring(plan)
    >>> result.summary
    'Successfully completed 3/3 tasks'

Tags:
    orchestration, planning, forecasting, friction, docdoctor

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable
from typing import Any

from docdoctor.core.errors import OrchestrationError, PlanNotFoundError
from docdoctor.core.logging import LogContext, get_logger
from docdoctor.core.settings import OrchestratorSettings
from docdoctor.core.timestamps import Clock, generate_id, utc_now
from docdoctor.orchestration.milestones import Milestone, MilestoneTracker
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
    TaskAssignment,
    TaskLocation,
    TaskOutcome,
    TaskResult,
    TraceContext,
)
from docdoctor.orchestration.policy import (
    SEMANTIC_SEARCH,
    TIER_CONFIDENCE,
    TIER_TOOL_POLICY,
    VECTOR_FAMILY_RELIABILITY,
    VECTOR_FAMILY_REVIEW_PATTERN,
    VECTOR_FAMILY_TASK_FAMILY,
    VECTOR_FAMILY_TOOLS,
    ReliabilityTier,
    VectorFamily,
    fallback_vector_family,
)

logger = get_logger(__name__)

TaskExecutor = Callable[[TaskAssignment], Any]
ProgressCallback = Callable[[ExecutionProgress], None]

PRIORITY_MODIFIERS: dict[str, float] = {
    "critical": 0.4,
    "high": 0.2,
    "low": -0.2,
}
BASE_PRIORITY = 0.5
BLOCKING_BONUS = 0.3
REFINEMENT_WEIGHT = 0.2

# Assumed average potential energy per task when estimating sessions
AVERAGE_TASK_ENERGY = 0.5
GAIN_PER_TASK = 0.05
MAX_REFINEMENT_GAIN = 0.3

TOOL_FAILURE_SEVERITY = 2
SLOW_PROGRESS_SEVERITY = 1
SESSION_LIMIT_REASON = "session task limit reached"


def _placeholder_executor(assignment: TaskAssignment) -> None:
    """Default executor: resolves every task without output."""
    return None


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class TaskOrchestrator:
    """
    Plans and runs the improvement work for one document at a time.

    Args:
        settings: Orchestrator knobs; defaults are read from the environment
        executor: Callable that performs one task; raising marks it failed
        milestones: Tracker that receives phase milestones
        clock: Time source for timestamps, durations and stall windows
    """

    def __init__(
        self,
        settings: OrchestratorSettings | None = None,
        executor: TaskExecutor | None = None,
        milestones: MilestoneTracker | None = None,
        clock: Clock | None = None,
    ):
        self.settings = settings or OrchestratorSettings()
        self.executor = executor or _placeholder_executor
        self._clock = clock or utc_now
        self.milestones = milestones or MilestoneTracker(clock=self._clock)
        self._plans: dict[str, OrchestrationPlan] = {}
        self._progress: dict[str, ExecutionProgress] = {}

    # =========================================================================
    # Discovery
    # =========================================================================

    def discover_tasks(
        self,
        document: DocumentState,
        trace_context: TraceContext | None = None,
    ) -> list[DiscoveredTask]:
        """One task per annotation, blocking first, then by descending priority."""
        trace = trace_context or TraceContext.new()
        self.milestones.record(
            trace.trace_id, Milestone.DISCOVERY_START, {"document_path": document.path}
        )
        logger.info("discovery_started", document_path=document.path, trace_id=trace.trace_id)

        tasks = [self._annotation_to_task(a, document) for a in document.annotations]
        # list.sort is stable: ties keep annotation order
        tasks.sort(key=lambda t: (not t.blocking, -t.priority_score))

        blocking = sum(1 for t in tasks if t.blocking)
        self.milestones.record(
            trace.trace_id,
            Milestone.DISCOVERY_COMPLETE,
            {"task_count": len(tasks), "blocking_count": blocking},
        )
        logger.info(
            "discovery_complete",
            trace_id=trace.trace_id,
            task_count=len(tasks),
            blocking=blocking,
            by_family=dict(Counter(t.task_family.value for t in tasks)),
        )
        return tasks

    def _annotation_to_task(self, annotation: Annotation, document: DocumentState) -> DiscoveredTask:
        vector_family = self._vector_family(annotation, document)
        potential_energy = (
            annotation.number("urgency")
            * annotation.number("impact")
            * annotation.number("complexity")
        )
        location = None
        if annotation.line_number:
            location = TaskLocation(line_number=annotation.line_number, section=annotation.section)

        return DiscoveredTask(
            id=f"task-{annotation.id}",
            stub_type=annotation.type,
            description=annotation.description,
            vector_family=vector_family,
            task_family=VECTOR_FAMILY_TASK_FAMILY[vector_family],
            priority_score=self.calculate_priority_score(annotation, document.refinement),
            potential_energy=potential_energy,
            blocking=annotation.blocking,
            annotation=annotation,
            location=location,
        )

    @staticmethod
    def _vector_family(annotation: Annotation, document: DocumentState) -> VectorFamily:
        definition = document.stub_types.get(annotation.type)
        if definition is not None and definition.vector_family is not None:
            return definition.vector_family
        return fallback_vector_family(annotation.type)

    @staticmethod
    def calculate_priority_score(annotation: Annotation, refinement: float) -> float:
        """Priority in [0, 1]; low-refinement documents push all their tasks up."""
        score = BASE_PRIORITY
        priority = annotation.properties.get("priority")
        if isinstance(priority, str):
            score += PRIORITY_MODIFIERS.get(priority.strip().lower(), 0.0)
        if annotation.blocking:
            score += BLOCKING_BONUS
        score += (1 - refinement) * REFINEMENT_WEIGHT
        return _clamp(score)

    # =========================================================================
    # Assignment and routing
    # =========================================================================

    def assign_to_families(
        self,
        tasks: list[DiscoveredTask],
        trace_context: TraceContext | None = None,
    ) -> list[TaskAssignment]:
        trace = trace_context or TraceContext.new()
        self.milestones.record(trace.trace_id, Milestone.ASSIGNMENT_START, {"task_count": len(tasks)})

        assignments = [self._assign(task) for task in tasks]

        by_tier = dict(Counter(a.reliability_tier.value for a in assignments))
        self.milestones.record(
            trace.trace_id,
            Milestone.ASSIGNMENT_COMPLETE,
            {"assignments": len(assignments), "by_tier": by_tier},
        )
        logger.debug("assignment_complete", trace_id=trace.trace_id, by_tier=by_tier)
        return assignments

    def _assign(self, task: DiscoveredTask) -> TaskAssignment:
        tier = VECTOR_FAMILY_RELIABILITY[task.vector_family]
        return TaskAssignment(
            task=task,
            reliability_tier=tier,
            review_pattern=VECTOR_FAMILY_REVIEW_PATTERN[task.vector_family],
            recommended_tools=list(VECTOR_FAMILY_TOOLS[task.vector_family]),
            tool_policy=TIER_TOOL_POLICY.get(tier, self.settings.default_tool_policy),
            confidence=TIER_CONFIDENCE[tier],
        )

    @staticmethod
    def select_tools(assignment: TaskAssignment) -> list[str]:
        """Recommended tools, plus semantic search for anything but low-tier work."""
        tools = list(assignment.recommended_tools)
        if SEMANTIC_SEARCH not in tools and assignment.reliability_tier != ReliabilityTier.LOW:
            tools.append(SEMANTIC_SEARCH)
        return tools

    @staticmethod
    def determine_execution_order(assignments: list[TaskAssignment]) -> list[str]:
        """Task ids: blocking first, then most automatable tier, then priority."""
        ordered = sorted(
            assignments,
            key=lambda a: (
                not a.task.blocking,
                a.reliability_tier.rank,
                -a.task.priority_score,
            ),
        )
        return [a.task.id for a in ordered]

    # =========================================================================
    # Forecasting
    # =========================================================================

    def forecast_completion(self, tasks: list[DiscoveredTask], document: DocumentState) -> Forecast:
        """
        Estimate sessions and refinement gain for a set of tasks.

        The total refinement gain is the stub penalty the tasks represent
        (0.05 each, capped at 0.3), spread evenly over the estimated sessions.
        """
        total_energy = sum(t.potential_energy for t in tasks)
        velocity = self.settings.historical_velocity

        sessions = 0
        if total_energy > 0:
            sessions = math.ceil(total_energy / (velocity * AVERAGE_TASK_ENERGY))

        total_gain = min(len(tasks) * GAIN_PER_TASK, MAX_REFINEMENT_GAIN)
        delta_per_session = total_gain / sessions if sessions > 0 else 0.0

        blocking = sum(1 for t in tasks if t.blocking)
        low_reliability = sum(
            1 for t in tasks if VECTOR_FAMILY_RELIABILITY[t.vector_family] == ReliabilityTier.LOW
        )

        risks: list[str] = []
        if blocking > 3:
            risks.append(f"{blocking} blocking stubs may slow progress")
        if low_reliability > len(tasks) * 0.5:
            risks.append("Many tasks require creative/generative work with lower predictability")

        confidence = 0.7
        if len(tasks) > 20:
            confidence -= 0.2
        if blocking > 5:
            confidence -= 0.1
        if low_reliability > len(tasks) * 0.3:
            confidence -= 0.1

        return Forecast(
            total_potential_energy=total_energy,
            estimated_velocity=velocity,
            estimated_sessions=sessions,
            refinement_delta_per_session=delta_per_session,
            projected_refinement=min(1.0, document.refinement + total_gain),
            confidence=max(0.1, confidence),
            risks=risks,
        )

    # =========================================================================
    # Plans
    # =========================================================================

    def create_plan(self, document: DocumentState) -> OrchestrationPlan:
        trace = TraceContext.new()
        plan_id = generate_id("plan")
        logger.info(
            "plan_creating",
            plan_id=plan_id,
            trace_id=trace.trace_id,
            document_path=document.path,
            annotations=len(document.annotations),
        )

        tasks = self.discover_tasks(document, trace)
        assignments = self.assign_to_families(tasks, trace)
        plan = OrchestrationPlan(
            id=plan_id,
            trace_context=trace,
            document_state=document,
            tasks=tasks,
            assignments=assignments,
            execution_order=self.determine_execution_order(assignments),
            forecast=self.forecast_completion(tasks, document),
            created_at=self._clock(),
        )
        self._plans[plan_id] = plan

        logger.info(
            "plan_created",
            plan_id=plan_id,
            task_count=len(tasks),
            estimated_sessions=plan.forecast.estimated_sessions,
        )
        return plan

    def get_plan(self, plan_id: str) -> OrchestrationPlan | None:
        return self._plans.get(plan_id)

    def get_progress(self, plan_id: str) -> ExecutionProgress | None:
        """Snapshot of the latest run's progress for a plan, if it was ever run."""
        progress = self._progress.get(plan_id)
        return progress.snapshot() if progress is not None else None

    def record_friction(
        self,
        plan_id: str,
        type: FrictionType | str,
        severity: int,
        message: str,
        task_id: str | None = None,
    ) -> FrictionIndicator:
        """
        Report friction into a plan's run.

        Executors and callers use this for trouble the loop cannot see on
        its own (a rejected suggestion, low-quality output). The indicator
        counts towards the stall check before the next task.

        Raises:
            PlanNotFoundError: Unknown plan id
            OrchestrationError: The plan has never been executed
            ValidationError: Unknown friction type or severity outside 1..5
        """
        if plan_id not in self._plans and plan_id not in self._progress:
            raise PlanNotFoundError(plan_id)
        progress = self._progress.get(plan_id)
        if progress is None:
            raise OrchestrationError(f"Plan {plan_id} has no execution in progress").with_context(
                plan_id=plan_id
            )

        now = self._clock()
        indicator = FrictionIndicator(
            type=type,
            severity=severity,
            message=message,
            timestamp=now,
            task_id=task_id,
        )
        progress.friction.append(indicator)
        progress.last_updated_at = now
        logger.info(
            "friction_recorded",
            plan_id=plan_id,
            friction_type=indicator.type.value,
            severity=severity,
            task_id=task_id,
        )
        return indicator

    # =========================================================================
    # Monitored execution
    # =========================================================================

    def execute_with_monitoring(
        self,
        plan: OrchestrationPlan,
        on_progress: ProgressCallback | None = None,
    ) -> ExecutionResult:
        """
        Run the plan's tasks in execution order, one at a time.

        Before each task ``on_progress`` receives a snapshot and the stall
        condition is checked. At most ``max_tasks_per_session`` tasks are
        attempted; the rest are recorded as skipped. A stalled run stops
        without touching the remaining tasks.

        Raises:
            Exception: Whatever the executor raised, when
                ``auto_skip_on_failure`` is off
        """
        started = self._clock()
        trace_id = plan.trace_context.trace_id
        self._plans.setdefault(plan.id, plan)
        self.milestones.record(trace_id, Milestone.TOOL_EXECUTION_START, {"plan_id": plan.id})

        progress = ExecutionProgress(plan_id=plan.id, started_at=started, last_updated_at=started)
        self._progress[plan.id] = progress

        total = len(plan.execution_order)
        limit = min(total, self.settings.max_tasks_per_session)
        task_results: list[TaskResult] = []

        with LogContext(plan_id=plan.id, trace_id=trace_id):
            logger.info("execution_started", task_count=total, session_limit=limit)

            for index, task_id in enumerate(plan.execution_order[:limit]):
                assignment = plan.get_assignment(task_id)
                if assignment is None:
                    logger.warning("execution_task_missing", task_id=task_id)
                    continue

                progress.current_task_id = task_id
                progress.progress_percent = round(index / total * 100)
                progress.last_updated_at = self._clock()

                if on_progress is not None:
                    on_progress(progress.snapshot())

                if self._is_stalled(progress):
                    progress.stalled = True
                    logger.warning(
                        "execution_stalled",
                        friction_count=len(progress.friction),
                        completed=len(progress.completed_tasks),
                    )
                    break

                task_results.append(self._run_task(assignment, progress))

            if not progress.stalled:
                for task_id in plan.execution_order[limit:]:
                    progress.skipped_tasks.append(TaskOutcome(task_id, SESSION_LIMIT_REASON))
                progress.progress_percent = 100

            progress.current_task_id = None
            finished = self._clock()
            progress.last_updated_at = finished

            self.milestones.record(
                trace_id,
                Milestone.TOOL_EXECUTION_COMPLETE,
                {
                    "plan_id": plan.id,
                    "completed": len(progress.completed_tasks),
                    "failed": len(progress.failed_tasks),
                },
            )

            success_count = sum(1 for r in task_results if r.success)
            refinement_delta = 0.0
            if total > 0:
                refinement_delta = (
                    success_count
                    / total
                    * plan.forecast.refinement_delta_per_session
                    * plan.forecast.estimated_sessions
                )

            result = ExecutionResult(
                plan_id=plan.id,
                success=not progress.failed_tasks and not progress.stalled,
                progress=progress,
                task_results=task_results,
                total_duration_ms=(finished - started).total_seconds() * 1000,
                actual_refinement_delta=refinement_delta,
                summary=self._summarize(progress),
            )
            logger.info(
                "execution_complete",
                success=result.success,
                completed=len(progress.completed_tasks),
                failed=len(progress.failed_tasks),
                skipped=len(progress.skipped_tasks),
                stalled=progress.stalled,
            )
        return result

    def _run_task(self, assignment: TaskAssignment, progress: ExecutionProgress) -> TaskResult:
        task_id = assignment.task.id
        task_started = self._clock()
        try:
            output = self.executor(assignment)
        except Exception as exc:
            now = self._clock()
            duration_ms = (now - task_started).total_seconds() * 1000
            if not self.settings.auto_skip_on_failure:
                logger.error("task_failed", task_id=task_id, error=str(exc), auto_skip=False)
                raise

            reason = str(exc) or type(exc).__name__
            progress.failed_tasks.append(TaskOutcome(task_id, reason))
            progress.friction.append(
                FrictionIndicator(
                    type=FrictionType.TOOL_FAILURE,
                    severity=TOOL_FAILURE_SEVERITY,
                    message=f"Task {task_id} failed: {reason}",
                    timestamp=now,
                    task_id=task_id,
                )
            )
            logger.warning("task_failed", task_id=task_id, error=reason, duration_ms=duration_ms)
            return TaskResult(task_id=task_id, success=False, duration_ms=duration_ms, error=reason)

        now = self._clock()
        elapsed = (now - task_started).total_seconds()
        progress.completed_tasks.append(task_id)
        if elapsed > self.settings.task_timeout_seconds:
            progress.friction.append(
                FrictionIndicator(
                    type=FrictionType.SLOW_PROGRESS,
                    severity=SLOW_PROGRESS_SEVERITY,
                    message=(
                        f"Task {task_id} took {elapsed:.1f}s "
                        f"(timeout {self.settings.task_timeout_seconds:.1f}s)"
                    ),
                    timestamp=now,
                    task_id=task_id,
                )
            )
            logger.warning("task_slow", task_id=task_id, elapsed_seconds=elapsed)

        logger.debug("task_completed", task_id=task_id, duration_ms=elapsed * 1000)
        return TaskResult(task_id=task_id, success=True, duration_ms=elapsed * 1000, output=output)

    def _is_stalled(self, progress: ExecutionProgress) -> bool:
        severity = progress.recent_friction_severity(self._clock(), self.settings.stall_window_seconds)
        return severity >= self.settings.stall_friction_threshold

    @staticmethod
    def _summarize(progress: ExecutionProgress) -> str:
        completed = len(progress.completed_tasks)
        failed = len(progress.failed_tasks)
        total = completed + failed + len(progress.skipped_tasks)

        if progress.stalled:
            return f"Execution stalled after {completed}/{total} tasks due to friction"
        if failed == 0:
            return f"Successfully completed {completed}/{total} tasks"
        return f"Completed {completed}/{total} tasks with {failed} failures"


__all__ = [
    "TaskOrchestrator",
    "TaskExecutor",
    "ProgressCallback",
    "PRIORITY_MODIFIERS",
]
