"""Reference verification records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ReferenceType(str, Enum):
    EXTERNAL_URL = "external_url"
    ACADEMIC_DOI = "academic_doi"
    VAULT_LINK = "vault_link"
    CITATION = "citation"
    UNKNOWN = "unknown"


class VerificationMethod(str, Enum):
    TOOL_CALL = "tool_call"
    PATTERN_MATCH = "pattern_match"
    POST_CHECK = "post_check"
    UNVERIFIED = "unverified"
    SELF_REFERENCE = "self_reference"


@dataclass(frozen=True)
class ReferenceCandidate:
    """A claimed citation, link or URL found in free text."""

    reference: str
    type: ReferenceType
    context: str = ""
    stub_type: str | None = None

    def __post_init__(self):
        if not isinstance(self.type, ReferenceType):
            object.__setattr__(self, "type", ReferenceType(self.type))


@dataclass(frozen=True)
class ToolResult:
    """One result returned by an evidence-gathering tool."""

    title: str | None = None
    url: str | None = None
    doi: str | None = None
    vault_path: str | None = None
    snippet: str | None = None
    score: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolResult:
        """Create from dictionary; ``vaultPath`` and ``path`` are accepted for ``vault_path``."""
        return cls(
            title=data.get("title"),
            url=data.get("url"),
            doi=data.get("doi"),
            vault_path=data.get("vault_path") or data.get("vaultPath") or data.get("path"),
            snippet=data.get("snippet"),
            score=data.get("score"),
        )


@dataclass(frozen=True)
class ToolCallRecord:
    """A tool invocation and everything it returned."""

    tool: str
    args: dict[str, Any]
    results: list[ToolResult]
    timestamp: datetime


@dataclass(frozen=True)
class DocumentContext:
    """The document under analysis, for self-reference detection."""

    path: str
    title: str = ""
    key_phrases: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VerifiedReference:
    """A candidate plus the outcome of verifying it."""

    reference: str
    type: ReferenceType
    verified: bool
    verification_method: VerificationMethod
    confidence: float
    verification_details: str = ""
    context: str = ""
    stub_type: str | None = None

    @classmethod
    def from_candidate(
        cls,
        candidate: ReferenceCandidate,
        *,
        verified: bool,
        method: VerificationMethod,
        confidence: float,
        details: str,
    ) -> VerifiedReference:
        return cls(
            reference=candidate.reference,
            type=candidate.type,
            verified=verified,
            verification_method=method,
            confidence=confidence,
            verification_details=details,
            context=candidate.context,
            stub_type=candidate.stub_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "type": self.type.value,
            "verified": self.verified,
            "verification_method": self.verification_method.value,
            "confidence": self.confidence,
            "verification_details": self.verification_details,
            "context": self.context,
        }


@dataclass(frozen=True)
class VerificationSummary:
    total: int
    verified: int
    unverified: int
    self_references: int
    verification_rate: float
    tool_calls_used: int
    by_method: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VerificationBadge:
    """Display classification of a verified reference."""

    severity: str
    icon: str
    color: str
    label: str
    tooltip: str


__all__ = [
    "ReferenceType",
    "VerificationMethod",
    "ReferenceCandidate",
    "ToolResult",
    "ToolCallRecord",
    "DocumentContext",
    "VerifiedReference",
    "VerificationSummary",
    "VerificationBadge",
]
