"""Tests for docdoctor.core.errors module."""

import pytest

from docdoctor.core.errors import (
    ConfigError,
    DocDoctorError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    OrchestrationError,
    ParseError,
    PlanNotFoundError,
    ValidationError,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.plan_id is None
        assert ctx.document_path is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        """to_dict includes only non-None fields."""
        ctx = ErrorContext(plan_id="plan-1", task_id="task-a")
        assert ctx.to_dict() == {"plan_id": "plan-1", "task_id": "task-a"}

    def test_to_dict_merges_metadata(self):
        ctx = ErrorContext(source="doc.yaml", metadata={"line": 3})
        assert ctx.to_dict() == {"source": "doc.yaml", "line": 3}


class TestDocDoctorError:
    """Test the base exception."""

    def test_default_category_is_internal(self):
        error = DocDoctorError("boom")
        assert error.category == ErrorCategory.INTERNAL
        assert str(error) == "boom"

    def test_category_override(self):
        error = DocDoctorError("boom", category=ErrorCategory.PARSE)
        assert error.category == ErrorCategory.PARSE

    def test_cause_is_chained(self):
        cause = ValueError("bad value")
        error = DocDoctorError("wrapped", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "bad value"

    def test_with_context_sets_known_fields_and_metadata(self):
        error = DocDoctorError("boom").with_context(document_path="a.md", attempt=2)
        assert error.context.document_path == "a.md"
        assert error.context.metadata == {"attempt": 2}

    def test_with_context_returns_self(self):
        error = ParseError("bad")
        assert error.with_context(source="x") is error

    def test_to_dict(self):
        error = OrchestrationError("nope").with_context(plan_id="plan-9")
        data = error.to_dict()
        assert data["error_type"] == "OrchestrationError"
        assert data["category"] == "ORCHESTRATION"
        assert data["context"] == {"plan_id": "plan-9"}

    def test_repr(self):
        assert repr(ParseError("bad yaml")) == "ParseError('bad yaml', category=PARSE)"


class TestSubclasses:
    """Test the concrete error types."""

    @pytest.mark.parametrize(
        "error_cls,category",
        [
            (ConfigError, ErrorCategory.CONFIG),
            (ValidationError, ErrorCategory.VALIDATION),
            (ParseError, ErrorCategory.PARSE),
            (OrchestrationError, ErrorCategory.ORCHESTRATION),
        ],
    )
    def test_default_categories(self, error_cls, category):
        assert error_cls("x").category == category
        assert isinstance(error_cls("x"), DocDoctorError)

    def test_invalid_config_error(self):
        error = InvalidConfigError("max_snapshots", 0)
        assert error.key == "max_snapshots"
        assert error.value == 0
        assert "max_snapshots" in error.message
        assert isinstance(error, ConfigError)

    def test_validation_error_fields(self):
        error = ValidationError("out of range", field="severity", value=9)
        data = error.to_dict()
        assert data["field"] == "severity"
        assert data["value"] == "9"

    def test_plan_not_found(self):
        error = PlanNotFoundError("plan-404")
        assert error.plan_id == "plan-404"
        assert error.context.plan_id == "plan-404"
        assert "plan-404" in str(error)
        assert isinstance(error, OrchestrationError)
