"""
Structured error types for Doc Doctor.

Most failure states in the engine are represented as data (a failed task
entry, ``stalled=True``, a ``None`` trend). Exceptions are reserved for
caller-contract violations: an unknown plan id, an out-of-range friction
severity, an invalid configuration value, or an unreadable input file.

Hierarchy::

    DocDoctorError  (category, context, cause)
      ├── ConfigError
      │     └── InvalidConfigError
      ├── ValidationError
      ├── ParseError
      └── OrchestrationError
            └── PlanNotFoundError

Examples:
    >>> error = PlanNotFoundError("plan-123")
    >>> error.category
    <ErrorCategory.ORCHESTRATION: 'ORCHESTRATION'>
    >>> error.with_context(document_path="notes/a.md").to_dict()["context"]
    {'document_path': 'notes/a.md'}

Tags:
    error-handling, exception-hierarchy, error-context, docdoctor

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    PARSE = "PARSE"
    ORCHESTRATION = "ORCHESTRATION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error for logging.

    Attributes:
        plan_id: Orchestration plan the error belongs to
        task_id: Task within the plan
        document_path: Document being processed
        source: File or collaborator the bad input came from
        metadata: Additional key-value pairs
    """

    plan_id: str | None = None
    task_id: str | None = None
    document_path: str | None = None
    source: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["plan_id", "task_id", "document_path", "source"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DocDoctorError(Exception):
    """
    Base exception for all Doc Doctor errors.

    Subclasses set ``default_category``; callers can override it per
    instance. The optional ``cause`` is chained as ``__cause__`` so the
    original traceback survives.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocDoctorError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ParseError("Bad YAML").with_context(source="doc.yaml")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(DocDoctorError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid value for {key}: {value!r}", **kwargs)


# =============================================================================
# INPUT ERRORS
# =============================================================================


class ValidationError(DocDoctorError):
    """A caller supplied a value outside its documented range."""

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class ParseError(DocDoctorError):
    """An input file (document snapshot, evidence, snapshot export) could not be read."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# ORCHESTRATION ERRORS
# =============================================================================


class OrchestrationError(DocDoctorError):
    """Orchestration plan or run error."""

    default_category = ErrorCategory.ORCHESTRATION


class PlanNotFoundError(OrchestrationError):
    """Raised when a plan id is not known to the orchestrator."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(
            f"Orchestration plan not found: {plan_id}",
            context=ErrorContext(plan_id=plan_id),
        )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocDoctorError",
    "ConfigError",
    "InvalidConfigError",
    "ValidationError",
    "ParseError",
    "OrchestrationError",
    "PlanNotFoundError",
]
