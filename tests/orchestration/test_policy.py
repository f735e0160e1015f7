"""Tests for the vector-family policy tables."""

import pytest

from docdoctor.orchestration.policy import (
    TIER_CONFIDENCE,
    TIER_TOOL_POLICY,
    VECTOR_FAMILY_RELIABILITY,
    VECTOR_FAMILY_REVIEW_PATTERN,
    VECTOR_FAMILY_TASK_FAMILY,
    VECTOR_FAMILY_TOOLS,
    ReliabilityTier,
    ReviewPattern,
    TaskFamily,
    ToolUsePolicy,
    VectorFamily,
    fallback_vector_family,
)


class TestTablesAreTotal:
    @pytest.mark.parametrize(
        "table",
        [
            VECTOR_FAMILY_RELIABILITY,
            VECTOR_FAMILY_REVIEW_PATTERN,
            VECTOR_FAMILY_TASK_FAMILY,
            VECTOR_FAMILY_TOOLS,
        ],
    )
    def test_every_family_present(self, table):
        assert set(table) == set(VectorFamily)

    def test_every_tier_has_policy_and_confidence(self):
        assert set(TIER_TOOL_POLICY) == set(ReliabilityTier)
        assert set(TIER_CONFIDENCE) == set(ReliabilityTier)


class TestTableValues:
    @pytest.mark.parametrize(
        "family,tier,pattern,task_family",
        [
            (VectorFamily.RETRIEVAL, ReliabilityTier.HIGH, ReviewPattern.AUTO_WITH_SPOT_CHECK, TaskFamily.COMBINATORIAL),
            (VectorFamily.COMPUTATION, ReliabilityTier.HIGH, ReviewPattern.VALIDATE_COMPUTATION, TaskFamily.COMBINATORIAL),
            (VectorFamily.SYNTHESIS, ReliabilityTier.MEDIUM, ReviewPattern.HUMAN_REVIEW_REQUIRED, TaskFamily.SYNOPTIC),
            (VectorFamily.CREATION, ReliabilityTier.LOW, ReviewPattern.GENERATE_OPTIONS_HUMAN_SELECT, TaskFamily.GENERATIVE),
            (VectorFamily.STRUCTURAL, ReliabilityTier.MEDIUM, ReviewPattern.VALIDATE_TOPOLOGY, TaskFamily.OPERATIONAL),
        ],
    )
    def test_family_rows(self, family, tier, pattern, task_family):
        assert VECTOR_FAMILY_RELIABILITY[family] == tier
        assert VECTOR_FAMILY_REVIEW_PATTERN[family] == pattern
        assert VECTOR_FAMILY_TASK_FAMILY[family] == task_family

    def test_retrieval_tools(self):
        assert VECTOR_FAMILY_TOOLS[VectorFamily.RETRIEVAL] == (
            "web_search",
            "openalex_search",
            "semantic_search",
        )

    def test_creation_has_no_tools(self):
        assert VECTOR_FAMILY_TOOLS[VectorFamily.CREATION] == ()

    def test_tier_policy_and_confidence(self):
        assert TIER_TOOL_POLICY[ReliabilityTier.HIGH] == ToolUsePolicy.MANDATORY
        assert TIER_TOOL_POLICY[ReliabilityTier.MEDIUM] == ToolUsePolicy.ENCOURAGED
        assert TIER_TOOL_POLICY[ReliabilityTier.LOW] == ToolUsePolicy.OPTIONAL
        assert TIER_CONFIDENCE == {
            ReliabilityTier.HIGH: 0.9,
            ReliabilityTier.MEDIUM: 0.7,
            ReliabilityTier.LOW: 0.5,
        }

    def test_tier_rank_orders_most_automatable_first(self):
        ranked = sorted(ReliabilityTier, key=lambda t: t.rank)
        assert ranked == [ReliabilityTier.HIGH, ReliabilityTier.MEDIUM, ReliabilityTier.LOW]


class TestVectorFamilyParsing:
    @pytest.mark.parametrize("raw", ["Retrieval", "retrieval", " RETRIEVAL "])
    def test_case_insensitive(self, raw):
        assert VectorFamily(raw) is VectorFamily.RETRIEVAL

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            VectorFamily("Telepathy")


class TestFallbackVectorFamily:
    @pytest.mark.parametrize(
        "stub_type,expected",
        [
            ("source", VectorFamily.RETRIEVAL),
            ("needs-source", VectorFamily.RETRIEVAL),
            ("data", VectorFamily.COMPUTATION),
            ("fix", VectorFamily.SYNTHESIS),
            ("move", VectorFamily.STRUCTURAL),
            ("draft", VectorFamily.CREATION),
            ("Source", VectorFamily.RETRIEVAL),
        ],
    )
    def test_known_types(self, stub_type, expected):
        assert fallback_vector_family(stub_type) == expected

    def test_unknown_type_is_creation(self):
        assert fallback_vector_family("mystery") == VectorFamily.CREATION
        assert fallback_vector_family("needs-mystery") == VectorFamily.CREATION
