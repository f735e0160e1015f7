"""
CLI: ``docdoctor plan``: build (and optionally run) an orchestration plan.
"""

from __future__ import annotations

from pathlib import Path

import typer

from docdoctor.cli.utils import _print_dict, console, fail, load_mapping, output_items, print_json
from docdoctor.core.errors import DocDoctorError, ParseError


def plan_document(
    document: Path = typer.Argument(..., help="Document snapshot (YAML or JSON)"),
    execute: bool = typer.Option(False, "--execute", "-x", help="Run the plan with the default executor."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Discover, prioritize and forecast the work in a document."""
    from docdoctor.core.settings import OrchestratorSettings, load_settings
    from docdoctor.orchestration.models import DocumentState
    from docdoctor.orchestration.orchestrator import TaskOrchestrator

    try:
        data = load_mapping(document)
        try:
            state = DocumentState.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Invalid document snapshot: {exc}", cause=exc).with_context(
                source=str(document)
            ) from exc

        orchestrator = TaskOrchestrator(load_settings(OrchestratorSettings))
        plan = orchestrator.create_plan(state)
        result = orchestrator.execute_with_monitoring(plan) if execute else None
    except DocDoctorError as exc:
        fail(exc)

    if json_out:
        payload = {"plan": plan.to_dict()}
        if result is not None:
            payload["execution"] = result.to_dict()
        print_json(payload)
        return

    rows = []
    for task_id in plan.execution_order:
        assignment = plan.get_assignment(task_id)
        task = assignment.task
        rows.append({
            "task": task.id,
            "type": task.stub_type,
            "family": task.vector_family,
            "tier": assignment.reliability_tier,
            "tools": orchestrator.select_tools(assignment),
            "priority": task.priority_score,
            "energy": task.potential_energy,
            "blocking": task.blocking,
        })
    output_items(rows, title=f"Plan {plan.id}: {state.path}")
    _print_dict(plan.forecast.to_dict(), title="Forecast")

    if result is not None:
        console.print(f"\n[bold]Execution:[/bold] {result.summary}")
