"""Vector-family policy tables.

Every work item is classified into one of five vector families. The family
alone decides how far automation can be trusted with the item: its
reliability tier, the review pattern its output needs, the tools it should
reach for, and its task family.

::

    VectorFamily  │ tier    │ review pattern                │ task family
    ──────────────┼─────────┼───────────────────────────────┼─────────────
    Retrieval     │ high    │ auto-with-spot-check          │ combinatorial
    Computation   │ high    │ validate-computation          │ combinatorial
    Synthesis     │ medium  │ human-review-required         │ synoptic
    Creation      │ low     │ generate-options-human-select │ generative
    Structural    │ medium  │ validate-topology             │ operational

The tables are total over :class:`VectorFamily`, so lookups never miss.
"""

from __future__ import annotations

from enum import Enum


class VectorFamily(str, Enum):
    """Semantic category of a work item."""

    RETRIEVAL = "Retrieval"
    COMPUTATION = "Computation"
    SYNTHESIS = "Synthesis"
    CREATION = "Creation"
    STRUCTURAL = "Structural"

    @classmethod
    def _missing_(cls, value: object) -> VectorFamily | None:
        # Type vocabularies written by hand use any casing
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ReliabilityTier(str, Enum):
    """Automation trust level."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, most automatable first."""
        return _TIER_RANK[self]


class ReviewPattern(str, Enum):
    """How the output of a task must be reviewed."""

    AUTO_WITH_SPOT_CHECK = "auto-with-spot-check"
    VALIDATE_COMPUTATION = "validate-computation"
    HUMAN_REVIEW_REQUIRED = "human-review-required"
    GENERATE_OPTIONS_HUMAN_SELECT = "generate-options-human-select"
    VALIDATE_TOPOLOGY = "validate-topology"


class TaskFamily(str, Enum):
    """Coarse task classification derived from the vector family."""

    COMBINATORIAL = "combinatorial"
    SYNOPTIC = "synoptic"
    GENERATIVE = "generative"
    OPERATIONAL = "operational"


class ToolUsePolicy(str, Enum):
    """How strongly a task is pushed towards tool use."""

    MANDATORY = "mandatory"
    ENCOURAGED = "encouraged"
    OPTIONAL = "optional"
    DISABLED = "disabled"


_TIER_RANK: dict[ReliabilityTier, int] = {
    ReliabilityTier.HIGH: 0,
    ReliabilityTier.MEDIUM: 1,
    ReliabilityTier.LOW: 2,
}

VECTOR_FAMILY_RELIABILITY: dict[VectorFamily, ReliabilityTier] = {
    VectorFamily.RETRIEVAL: ReliabilityTier.HIGH,
    VectorFamily.COMPUTATION: ReliabilityTier.HIGH,
    VectorFamily.SYNTHESIS: ReliabilityTier.MEDIUM,
    VectorFamily.CREATION: ReliabilityTier.LOW,
    VectorFamily.STRUCTURAL: ReliabilityTier.MEDIUM,
}

VECTOR_FAMILY_REVIEW_PATTERN: dict[VectorFamily, ReviewPattern] = {
    VectorFamily.RETRIEVAL: ReviewPattern.AUTO_WITH_SPOT_CHECK,
    VectorFamily.COMPUTATION: ReviewPattern.VALIDATE_COMPUTATION,
    VectorFamily.SYNTHESIS: ReviewPattern.HUMAN_REVIEW_REQUIRED,
    VectorFamily.CREATION: ReviewPattern.GENERATE_OPTIONS_HUMAN_SELECT,
    VectorFamily.STRUCTURAL: ReviewPattern.VALIDATE_TOPOLOGY,
}

VECTOR_FAMILY_TASK_FAMILY: dict[VectorFamily, TaskFamily] = {
    VectorFamily.RETRIEVAL: TaskFamily.COMBINATORIAL,
    VectorFamily.COMPUTATION: TaskFamily.COMBINATORIAL,
    VectorFamily.SYNTHESIS: TaskFamily.SYNOPTIC,
    VectorFamily.CREATION: TaskFamily.GENERATIVE,
    VectorFamily.STRUCTURAL: TaskFamily.OPERATIONAL,
}

SEMANTIC_SEARCH = "semantic_search"

VECTOR_FAMILY_TOOLS: dict[VectorFamily, tuple[str, ...]] = {
    VectorFamily.RETRIEVAL: ("web_search", "openalex_search", SEMANTIC_SEARCH),
    VectorFamily.COMPUTATION: (SEMANTIC_SEARCH,),
    VectorFamily.SYNTHESIS: (SEMANTIC_SEARCH,),
    VectorFamily.CREATION: (),
    VectorFamily.STRUCTURAL: (SEMANTIC_SEARCH,),
}

TIER_TOOL_POLICY: dict[ReliabilityTier, ToolUsePolicy] = {
    ReliabilityTier.HIGH: ToolUsePolicy.MANDATORY,
    ReliabilityTier.MEDIUM: ToolUsePolicy.ENCOURAGED,
    ReliabilityTier.LOW: ToolUsePolicy.OPTIONAL,
}

TIER_CONFIDENCE: dict[ReliabilityTier, float] = {
    ReliabilityTier.HIGH: 0.9,
    ReliabilityTier.MEDIUM: 0.7,
    ReliabilityTier.LOW: 0.5,
}

# Fallback for stub types whose definition carries no vector family
DEFAULT_STUB_VECTOR_FAMILY: dict[str, VectorFamily] = {
    "source": VectorFamily.RETRIEVAL,
    "check": VectorFamily.RETRIEVAL,
    "link": VectorFamily.RETRIEVAL,
    "data": VectorFamily.COMPUTATION,
    "fix": VectorFamily.SYNTHESIS,
    "cut": VectorFamily.SYNTHESIS,
    "draft": VectorFamily.CREATION,
    "expand": VectorFamily.CREATION,
    "idea": VectorFamily.CREATION,
    "question": VectorFamily.CREATION,
    "move": VectorFamily.STRUCTURAL,
    "restructure": VectorFamily.STRUCTURAL,
}

_TYPE_KEY_PREFIX = "needs-"


def fallback_vector_family(stub_type: str) -> VectorFamily:
    """Family for a stub type key with no explicit classification.

    ``needs-source`` and ``source`` resolve the same way; unknown keys
    are treated as creative work.
    """
    key = stub_type.strip().lower()
    if key in DEFAULT_STUB_VECTOR_FAMILY:
        return DEFAULT_STUB_VECTOR_FAMILY[key]
    if key.startswith(_TYPE_KEY_PREFIX):
        return DEFAULT_STUB_VECTOR_FAMILY.get(key[len(_TYPE_KEY_PREFIX):], VectorFamily.CREATION)
    return VectorFamily.CREATION


__all__ = [
    "VectorFamily",
    "ReliabilityTier",
    "ReviewPattern",
    "TaskFamily",
    "ToolUsePolicy",
    "VECTOR_FAMILY_RELIABILITY",
    "VECTOR_FAMILY_REVIEW_PATTERN",
    "VECTOR_FAMILY_TASK_FAMILY",
    "VECTOR_FAMILY_TOOLS",
    "TIER_TOOL_POLICY",
    "TIER_CONFIDENCE",
    "DEFAULT_STUB_VECTOR_FAMILY",
    "SEMANTIC_SEARCH",
    "fallback_vector_family",
]
