"""
CLI: ``docdoctor health``: health scores, forecasts and vault summaries.

``forecast`` and ``summary`` read a snapshot export, the JSON produced by
``HealthMonitor.export_snapshots()``.
"""

from __future__ import annotations

from pathlib import Path

import typer

from docdoctor.cli.utils import _print_dict, console, fail, load_mapping, print_json
from docdoctor.core.errors import DocDoctorError
from docdoctor.health.models import Audience

app = typer.Typer(no_args_is_help=True)


def _load_monitor(snapshots: Path):
    from docdoctor.core.settings import HealthMonitorSettings, load_settings
    from docdoctor.health.monitor import HealthMonitor

    try:
        monitor = HealthMonitor(load_settings(HealthMonitorSettings))
        monitor.import_snapshots(load_mapping(snapshots))
    except DocDoctorError as exc:
        fail(exc)
    return monitor


@app.command("score")
def health_score(
    refinement: float = typer.Argument(..., min=0.0, max=1.0, help="Refinement score in [0, 1]"),
    stubs: int = typer.Argument(..., min=0, help="Number of open stubs"),
    audience: Audience | None = typer.Option(None, "--audience", "-a"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Compute health and audience margin for one measurement."""
    from docdoctor.health.monitor import (
        calculate_health,
        calculate_stub_penalty,
        calculate_usefulness_margin,
        meets_audience_gate,
    )

    data = {
        "refinement": refinement,
        "stub_count": stubs,
        "stub_penalty": calculate_stub_penalty(stubs),
        "health": calculate_health(refinement, stubs),
        "audience": audience.value if audience else None,
        "usefulness_margin": calculate_usefulness_margin(refinement, audience),
        "meets_gate": meets_audience_gate(refinement, audience) if audience else None,
    }
    if json_out:
        print_json(data)
        return
    _print_dict(data, title="Health")


@app.command("forecast")
def health_forecast(
    snapshots: Path = typer.Argument(..., help="Snapshot export (JSON)"),
    document_path: str = typer.Argument(..., help="Document to forecast"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Trend and days-to-target forecast for one document."""
    monitor = _load_monitor(snapshots)
    trend = monitor.analyze_trend(document_path)
    forecast = monitor.forecast_days_to_target(document_path)

    if forecast is None:
        console.print(f"[dim]No snapshots for {document_path}.[/dim]")
        raise typer.Exit(code=1)

    if json_out:
        print_json({
            "trend": trend.model_dump(mode="json") if trend else None,
            "forecast": forecast.model_dump(mode="json"),
        })
        return

    if trend is None:
        console.print("[dim]Not enough recent snapshots for a trend.[/dim]")
    else:
        _print_dict(trend.model_dump(mode="json"), title="Trend")
    _print_dict(forecast.model_dump(mode="json"), title="Forecast")


@app.command("summary")
def health_summary(
    snapshots: Path = typer.Argument(..., help="Snapshot export (JSON)"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Vault-wide health summary."""
    summary = _load_monitor(snapshots).get_vault_summary()
    if json_out:
        print_json(summary.model_dump(mode="json"))
        return
    _print_dict(summary.model_dump(mode="json"), title="Vault")
