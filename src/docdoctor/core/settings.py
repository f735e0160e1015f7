"""
Settings for the Doc Doctor engine.

Each subsystem gets its own settings model so the host application can
construct an orchestrator or a health monitor with just the knobs it
cares about. Every field can come from keyword arguments, from
environment variables, or from a ``.env`` file.

Fields
──────
OrchestratorSettings   (DOCDOCTOR_ORCHESTRATOR_*)
    default_tool_policy       : Tool policy used when none is derived
    max_tasks_per_session     : Upper bound on tasks attempted in one run
    task_timeout_seconds      : Duration above which a task adds slow-progress friction
    auto_skip_on_failure      : Record failures and continue instead of raising
    stall_friction_threshold  : Recent friction severity that stalls a run
    stall_window_seconds      : How far back friction counts as "recent"
    historical_velocity       : Tasks resolved per session, for forecasting

HealthMonitorSettings  (DOCDOCTOR_HEALTH_*)
    max_snapshots             : History kept per document (FIFO)
    min_snapshots_for_trend   : Snapshots required before a trend is reported
    stable_threshold          : |health slope| per day below which a trend is stable
    trend_window_days         : Trailing window for trend analysis

DocDoctorSettings      (DOCDOCTOR_*)
    log_level, json_logs      : Logging setup for the CLI

Examples:
    >>> OrchestratorSettings(max_tasks_per_session=3).max_tasks_per_session
    3
    >>> load_settings(HealthMonitorSettings, max_snapshots=0)
    Traceback (most recent call last):
    ...
    InvalidConfigError: ...
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from docdoctor.core.errors import InvalidConfigError
from docdoctor.orchestration.policy import ToolUsePolicy

S = TypeVar("S", bound=BaseSettings)


class OrchestratorSettings(BaseSettings):
    """Knobs for :class:`~docdoctor.orchestration.orchestrator.TaskOrchestrator`."""

    model_config = SettingsConfigDict(
        env_prefix="DOCDOCTOR_ORCHESTRATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_tool_policy: ToolUsePolicy = Field(default=ToolUsePolicy.ENCOURAGED)
    max_tasks_per_session: int = Field(default=10, ge=1)
    task_timeout_seconds: float = Field(default=30.0, gt=0)
    auto_skip_on_failure: bool = Field(default=True)
    stall_friction_threshold: int = Field(default=3, ge=1)
    stall_window_seconds: float = Field(default=60.0, gt=0)
    historical_velocity: float = Field(
        default=5.0,
        gt=0,
        description="Tasks resolved per session",
    )


class HealthMonitorSettings(BaseSettings):
    """Knobs for :class:`~docdoctor.health.monitor.HealthMonitor`."""

    model_config = SettingsConfigDict(
        env_prefix="DOCDOCTOR_HEALTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_snapshots: int = Field(default=100, ge=1)
    min_snapshots_for_trend: int = Field(default=3, ge=2)
    # Less than 1% health change per day is "stable"
    stable_threshold: float = Field(default=0.01, ge=0)
    trend_window_days: int = Field(default=30, ge=1)


class DocDoctorSettings(BaseSettings):
    """Process-level settings used by the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="DOCDOCTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="WARNING")
    json_logs: bool | None = Field(
        default=None,
        description="JSON log lines; None picks console output on a TTY",
    )


def load_settings(settings_cls: type[S], **overrides: Any) -> S:
    """Build a settings object, reporting bad values as :class:`InvalidConfigError`.

    The first offending field is reported; the pydantic error is chained
    as the cause.
    """
    try:
        return settings_cls(**overrides)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or settings_cls.__name__
        raise InvalidConfigError(
            key,
            first.get("input"),
            f"Invalid value for {key}: {first.get('msg')}",
            cause=exc,
        ) from exc


__all__ = [
    "OrchestratorSettings",
    "HealthMonitorSettings",
    "DocDoctorSettings",
    "load_settings",
]
