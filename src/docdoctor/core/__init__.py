"""Doc Doctor Core -- errors, logging, settings and time/id helpers.

Architecture::

    errors.py       Structured error hierarchy (DocDoctorError and subclasses)
    logging.py      structlog configuration, get_logger, LogContext
    settings.py     pydantic-settings models per subsystem
    timestamps.py   UTC clock, prefixed ids, ISO-8601 helpers (stdlib-only)

``settings`` is not re-exported here; import it from
``docdoctor.core.settings`` directly.
"""

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
from docdoctor.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from docdoctor.core.timestamps import Clock, generate_id, utc_now

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
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "Clock",
    "utc_now",
    "generate_id",
]
