"""Tests for docdoctor.core.settings module.

Covers:
- Defaults for each settings model
- Environment variable override per prefix
- Validation errors surfaced as InvalidConfigError
"""

import pytest

from docdoctor.core.errors import InvalidConfigError
from docdoctor.core.settings import (
    DocDoctorSettings,
    HealthMonitorSettings,
    OrchestratorSettings,
    load_settings,
)
from docdoctor.orchestration.policy import ToolUsePolicy


class TestOrchestratorSettings:
    def test_defaults(self):
        s = OrchestratorSettings()
        assert s.default_tool_policy == ToolUsePolicy.ENCOURAGED
        assert s.max_tasks_per_session == 10
        assert s.task_timeout_seconds == 30.0
        assert s.auto_skip_on_failure is True
        assert s.stall_friction_threshold == 3
        assert s.stall_window_seconds == 60.0
        assert s.historical_velocity == 5.0

    def test_keyword_override(self):
        assert OrchestratorSettings(max_tasks_per_session=3).max_tasks_per_session == 3

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DOCDOCTOR_ORCHESTRATOR_MAX_TASKS_PER_SESSION", "4")
        monkeypatch.setenv("DOCDOCTOR_ORCHESTRATOR_AUTO_SKIP_ON_FAILURE", "false")
        s = OrchestratorSettings()
        assert s.max_tasks_per_session == 4
        assert s.auto_skip_on_failure is False

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("DOCDOCTOR_ORCHESTRATOR_HISTORICAL_VELOCITY=8\n")
        assert OrchestratorSettings().historical_velocity == 8.0


class TestHealthMonitorSettings:
    def test_defaults(self):
        s = HealthMonitorSettings()
        assert s.max_snapshots == 100
        assert s.min_snapshots_for_trend == 3
        assert s.stable_threshold == 0.01
        assert s.trend_window_days == 30

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DOCDOCTOR_HEALTH_MAX_SNAPSHOTS", "5")
        assert HealthMonitorSettings().max_snapshots == 5


class TestDocDoctorSettings:
    def test_defaults(self):
        s = DocDoctorSettings()
        assert s.log_level == "WARNING"
        assert s.json_logs is None


class TestLoadSettings:
    def test_returns_instance(self):
        s = load_settings(HealthMonitorSettings, max_snapshots=7)
        assert isinstance(s, HealthMonitorSettings)
        assert s.max_snapshots == 7

    def test_invalid_value_raises_invalid_config(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            load_settings(HealthMonitorSettings, max_snapshots=0)
        assert exc_info.value.key == "max_snapshots"
        assert exc_info.value.value == 0
        assert exc_info.value.__cause__ is not None

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("DOCDOCTOR_ORCHESTRATOR_HISTORICAL_VELOCITY", "-1")
        with pytest.raises(InvalidConfigError):
            load_settings(OrchestratorSettings)
