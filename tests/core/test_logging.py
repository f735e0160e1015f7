"""Tests for docdoctor.core.logging module."""

import json

import pytest
import structlog

from docdoctor.core.errors import InvalidConfigError
from docdoctor.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    clear_context()
    structlog.reset_defaults()


def _last_json_line(err: str) -> dict:
    lines = [line for line in err.strip().splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestConfigureLogging:
    def test_json_output_goes_to_stderr(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("docdoctor.test").info("plan_created", task_count=3)

        captured = capsys.readouterr()
        assert captured.out == ""
        record = _last_json_line(captured.err)
        assert record["event"] == "plan_created"
        assert record["task_count"] == 3
        assert record["log.logger"] == "docdoctor.test"
        assert record["log.level"] == "info"
        assert record["service.name"] == "docdoctor"
        assert "@timestamp" in record

    def test_level_filters_lower_events(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("docdoctor.test")
        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_custom_service_name(self, capsys):
        configure_logging(level="INFO", json_format=True, service="vault-sync")
        get_logger().info("hello")
        assert _last_json_line(capsys.readouterr().err)["service.name"] == "vault-sync"

    def test_without_timestamp(self, capsys):
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        get_logger().info("hello")
        assert "@timestamp" not in _last_json_line(capsys.readouterr().err)

    def test_level_is_case_insensitive(self, capsys):
        configure_logging(level="debug", json_format=True)
        get_logger().debug("low_level")
        assert "low_level" in capsys.readouterr().err

    def test_module_logger_created_before_configure(self, capsys):
        from docdoctor.orchestration import milestones

        configure_logging(level="INFO", json_format=True)
        milestones.logger.info("milestone_recorded", milestone="plan_created")

        record = _last_json_line(capsys.readouterr().err)
        assert record["event"] == "milestone_recorded"
        assert record["log.logger"] == "docdoctor.orchestration.milestones"

    def test_console_output_names_logger(self, capsys):
        configure_logging(level="INFO", json_format=False)
        get_logger(__name__).info("console_event")

        err = capsys.readouterr().err
        assert "console_event" in err
        assert __name__ in err

    def test_unknown_level_raises(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            configure_logging(level="LOUD")
        assert exc_info.value.key == "log_level"


class TestContext:
    def test_log_context_binds_and_unbinds(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("docdoctor.test")

        with LogContext(plan_id="plan-1", trace_id="orch-1"):
            logger.info("inside")
        logger.info("outside")

        lines = [json.loads(l) for l in capsys.readouterr().err.strip().splitlines()]
        assert lines[0]["plan_id"] == "plan-1"
        assert lines[0]["trace_id"] == "orch-1"
        assert "plan_id" not in lines[1]

    def test_bind_and_clear_context(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(document_path="notes/a.md")
        get_logger().info("first")
        clear_context()
        get_logger().info("second")

        lines = [json.loads(l) for l in capsys.readouterr().err.strip().splitlines()]
        assert lines[0]["document_path"] == "notes/a.md"
        assert "document_path" not in lines[1]
