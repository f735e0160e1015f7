"""
Tests for ReferenceVerifier.

Covers:
- Evidence recording and indexing
- Exact tool-call verification per reference type
- Pattern matching (same domain, title similarity)
- Self-reference detection and its precedence
- Summaries
"""

import pytest

from docdoctor.verification.models import (
    DocumentContext,
    ReferenceCandidate,
    ReferenceType,
    ToolResult,
    VerificationMethod,
)
from docdoctor.verification.verifier import ReferenceVerifier, word_overlap


@pytest.fixture
def verifier(clock):
    return ReferenceVerifier(clock=clock)


def url(ref):
    return ReferenceCandidate(ref, ReferenceType.EXTERNAL_URL)


def citation(ref):
    return ReferenceCandidate(ref, ReferenceType.CITATION)


def link(ref):
    return ReferenceCandidate(ref, ReferenceType.VAULT_LINK)


# ── Evidence ─────────────────────────────────────────────────


class TestRecordToolCall:
    def test_records_call(self, verifier, clock):
        verifier.record_tool_call("web_search", {"q": "scaling"}, [ToolResult(url="https://a.org")])
        (call,) = verifier.tool_calls
        assert call.tool == "web_search"
        assert call.args == {"q": "scaling"}
        assert call.timestamp == clock()

    def test_accepts_dicts(self, verifier):
        verifier.record_tool_call("semantic_search", {}, [{"vaultPath": "Notes/B", "title": "B"}])
        assert verifier.tool_calls[0].results[0].vault_path == "Notes/B"
        assert verifier.was_verified_by_tool(link("notes/b"))

    def test_clear(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://a.org")])
        verifier.set_document_context(DocumentContext(path="a.md"))
        verifier.clear()
        assert verifier.tool_calls == []
        assert verifier.document_context is None
        assert not verifier.was_verified_by_tool(url("https://a.org"))


# ── Exact verification ───────────────────────────────────────


class TestToolCallVerification:
    def test_url_normalized_match(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://example.com/a/")])
        result = verifier.verify_reference(url("HTTPS://EXAMPLE.com/a#top"))
        assert result.verified is True
        assert result.verification_method == VerificationMethod.TOOL_CALL
        assert result.confidence == 1.0
        assert result.verification_details == "Found in web_search results"

    def test_doi_match(self, verifier):
        verifier.record_tool_call("openalex_search", {}, [ToolResult(doi="10.1038/NATURE14539")])
        candidate = ReferenceCandidate("https://doi.org/10.1038/nature14539", ReferenceType.ACADEMIC_DOI)
        result = verifier.verify_reference(candidate)
        assert result.verification_method == VerificationMethod.TOOL_CALL
        assert result.verification_details == "Found in openalex_search results"

    def test_vault_link_match(self, verifier):
        verifier.record_tool_call("semantic_search", {}, [ToolResult(vault_path="[[Projects/Plan]]")])
        assert verifier.verify_reference(link("projects/plan")).verified is True

    def test_citation_found_in_title(self, verifier):
        verifier.record_tool_call(
            "openalex_search", {}, [ToolResult(title="Attention Is All You Need (2017)")]
        )
        result = verifier.verify_reference(citation("attention is all you need"))
        assert result.verification_method == VerificationMethod.TOOL_CALL

    def test_citation_found_in_snippet(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(snippet="... as shown by Vaswani et al. ...")])
        assert verifier.was_verified_by_tool(citation("Vaswani et al."))

    def test_unknown_type_never_tool_verified(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(title="anything")])
        assert not verifier.was_verified_by_tool(ReferenceCandidate("anything", ReferenceType.UNKNOWN))

    def test_candidate_fields_preserved(self, verifier):
        candidate = ReferenceCandidate("https://a.org", ReferenceType.EXTERNAL_URL, "ctx", "source")
        result = verifier.verify_reference(candidate)
        assert result.reference == "https://a.org"
        assert result.context == "ctx"
        assert result.stub_type == "source"


# ── Pattern matching ─────────────────────────────────────────


class TestPatternMatch:
    def test_same_domain(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://www.nature.com/articles/1")])
        result = verifier.verify_reference(url("https://nature.com/articles/2"))
        assert result.verified is True
        assert result.verification_method == VerificationMethod.PATTERN_MATCH
        assert result.confidence == 0.7
        assert result.verification_details == "Partial match: Same domain (nature.com) found in web_search"

    def test_different_subdomain_same_site(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://news.bbc.co.uk/a")])
        assert verifier.verify_reference(url("https://www.bbc.co.uk/b")).confidence == 0.7

    def test_shared_suffix_is_not_same_domain(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://bbc.co.uk/a")])
        result = verifier.verify_reference(url("https://itv.co.uk/b"))
        assert result.verification_method == VerificationMethod.UNVERIFIED

    def test_hosting_tenants_are_not_same_domain(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://alice.github.io/post")])
        result = verifier.verify_reference(url("https://bob.github.io/post"))
        assert result.verification_method == VerificationMethod.UNVERIFIED

    def test_title_similarity(self, verifier):
        verifier.record_tool_call(
            "web_search", {}, [ToolResult(title="Deep Residual Learning for Image Recognition")]
        )
        result = verifier.verify_reference(citation("Residual learning for image recognition networks"))
        assert result.verification_method == VerificationMethod.PATTERN_MATCH
        assert result.confidence == pytest.approx(0.8)
        assert result.verification_details == "Partial match: Title similarity (80%) in web_search"

    def test_low_similarity_unverified(self, verifier):
        verifier.record_tool_call("web_search", {}, [ToolResult(title="Protein folding with transformers")])
        result = verifier.verify_reference(citation("Residual learning for image recognition"))
        assert result.verified is False
        assert result.verification_method == VerificationMethod.UNVERIFIED
        assert result.confidence == 0.0
        assert result.verification_details == "No matching tool call result found"


class TestWordOverlap:
    def test_short_words_ignored(self):
        assert word_overlap("a of the", "a of the") == 0.0

    def test_ratio_over_larger_set(self):
        assert word_overlap("alpha beta gamma delta", "alpha beta") == pytest.approx(0.5)


# ── Self-reference ───────────────────────────────────────────


class TestSelfReference:
    @pytest.fixture
    def context(self):
        return DocumentContext(
            path="Notes/Scaling.md",
            title="Scaling Notebook",
            key_phrases=["emergent abilities of large models", "scaling laws predict emergent capability thresholds"],
        )

    def test_no_context_no_self_reference(self, verifier):
        assert verifier.verify_reference(citation("Scaling Notebook")).verification_method == (
            VerificationMethod.UNVERIFIED
        )

    def test_title_match(self, verifier, context):
        verifier.set_document_context(context)
        result = verifier.verify_reference(citation("scaling notebook"))
        assert result.verification_method == VerificationMethod.SELF_REFERENCE
        assert result.verified is False
        assert result.confidence == 0.0
        assert result.verification_details == "Reference appears to cite document content"

    def test_key_phrase_contained(self, verifier, context):
        verifier.set_document_context(context)
        result = verifier.verify_reference(citation("Smith on emergent abilities of large models"))
        assert result.verification_method == VerificationMethod.SELF_REFERENCE

    def test_key_phrase_paraphrase(self, verifier, context):
        verifier.set_document_context(context)
        result = verifier.verify_reference(citation("capability thresholds predicted by scaling laws"))
        assert result.verification_method == VerificationMethod.SELF_REFERENCE

    def test_self_reference_beats_evidence(self, verifier, context):
        verifier.set_document_context(context)
        verifier.record_tool_call("web_search", {}, [ToolResult(title="Scaling Notebook")])
        assert verifier.verify_reference(citation("Scaling Notebook")).verification_method == (
            VerificationMethod.SELF_REFERENCE
        )

    @pytest.mark.parametrize(
        "ref",
        [
            "notes/scaling",
            "Notes/Scaling|the notebook",
            "Notes/Scaling#Intro",
            "/Notes/Scaling.md",
            "archive/old-notes/scaling",
        ],
    )
    def test_vault_link_to_own_note(self, verifier, context, ref):
        verifier.set_document_context(context)
        assert verifier.verify_reference(link(ref)).verification_method == VerificationMethod.SELF_REFERENCE

    def test_vault_link_to_bare_note_name_is_not_self(self, verifier, context):
        verifier.set_document_context(context)
        assert verifier.verify_reference(link("scaling")).verification_method == VerificationMethod.UNVERIFIED

    def test_vault_link_partial_name_is_not_self(self, verifier):
        verifier.set_document_context(DocumentContext(path="notes/metadata.md"))
        assert verifier.verify_reference(link("data")).verification_method == VerificationMethod.UNVERIFIED

    def test_urls_never_self_references(self, verifier, context):
        verifier.set_document_context(context)
        result = verifier.verify_reference(url("https://example.com/scaling-notebook"))
        assert result.verification_method == VerificationMethod.UNVERIFIED

    def test_empty_title_is_ignored(self, verifier):
        verifier.set_document_context(DocumentContext(path="a.md", title=""))
        assert verifier.verify_reference(citation("Anything at all")).verification_method == (
            VerificationMethod.UNVERIFIED
        )


# ── Summary ──────────────────────────────────────────────────


class TestSummary:
    def test_empty(self, verifier):
        summary = verifier.get_verification_summary([])
        assert summary.total == 0
        assert summary.verification_rate == 1.0
        assert set(summary.by_method) == {m.value for m in VerificationMethod}

    def test_counts(self, verifier):
        verifier.set_document_context(DocumentContext(path="a.md", title="My Essay"))
        verifier.record_tool_call("web_search", {}, [ToolResult(url="https://a.org/x")])
        results = verifier.verify_all(
            [url("https://a.org/x"), url("https://a.org/y"), url("https://b.org"), citation("My Essay")]
        )

        summary = verifier.get_verification_summary(results)
        assert summary.total == 4
        assert summary.verified == 2
        assert summary.unverified == 1
        assert summary.self_references == 1
        assert summary.verification_rate == pytest.approx(0.5)
        assert summary.tool_calls_used == 1
        assert summary.by_method == {
            "tool_call": 1,
            "pattern_match": 1,
            "post_check": 0,
            "unverified": 1,
            "self_reference": 1,
        }
        assert summary.to_dict()["by_method"]["tool_call"] == 1
