"""
Root Typer application for the docdoctor CLI.

Commands operate on files so the engine can be used in batch jobs:
document snapshots for planning, tool-call evidence for verification and
snapshot exports for health.
"""

from __future__ import annotations

import typer
from typer import Typer

from docdoctor.cli.health import app as health_app
from docdoctor.cli.plan import plan_document
from docdoctor.cli.verify import verify_text

app = Typer(
    name="docdoctor",
    help="Plan document improvements and check their health and references.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from docdoctor import __version__

        try:
            v = pkg_version("docdoctor")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"docdoctor {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override DOCDOCTOR_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)."
    ),
) -> None:
    """Document improvement planning and review."""
    from docdoctor.cli.utils import fail
    from docdoctor.core.errors import DocDoctorError
    from docdoctor.core.logging import configure_logging
    from docdoctor.core.settings import DocDoctorSettings, load_settings

    try:
        settings = load_settings(DocDoctorSettings)
        configure_logging(level=log_level or settings.log_level, json_format=settings.json_logs)
    except DocDoctorError as exc:
        fail(exc)


# ── Sub-command registration ─────────────────────────────────────────────

app.command("plan")(plan_document)
app.command("verify")(verify_text)
app.add_typer(health_app, name="health", help="Health scores, forecasts and summaries.")
