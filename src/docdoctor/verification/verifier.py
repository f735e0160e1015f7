"""
Reference Verifier - checks claimed references against tool-call evidence.

Manifesto:
    An assistant that cites a source should have found that source through
    a tool. The verifier keeps the evidence of every tool call made during a
    session and classifies each claimed reference:

    - **self_reference:** it points back at the document being analyzed
    - **tool_call:** a tool returned exactly this URL / DOI / note
    - **pattern_match:** a tool returned something close (same domain,
      similar title)
    - **unverified:** nothing supports it

    The first matching check wins, in that order. Self-reference beats any
    amount of matching evidence.

Architecture:
    ::

        record_tool_call(tool, args, results)
              │
              ├── tool_calls (append-only)
              └── indexes: normalized URLs / DOIs / vault paths
                        │
        verify_reference(candidate)
              1. _is_self_reference   (needs set_document_context)
              2. was_verified_by_tool → confidence 1.0
              3. _find_pattern_match  → 0.7 (domain) or title overlap ratio
              4. unverified           → confidence 0

Examples:
    >>> verifier = ReferenceVerifier()
    >>> verifier.record_tool_call("web_search", {"q": "x"}, [ToolResult(url="https://example.com/a/")])
    >>> candidate = ReferenceCandidate("https://EXAMPLE.com/a", ReferenceType.EXTERNAL_URL)
    >>> verifier.verify_reference(candidate).verification_method
    <VerificationMethod.TOOL_CALL: 'tool_call'>

Tags:
    verification, citations, evidence, self-reference, docdoctor

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from docdoctor.core.logging import get_logger
from docdoctor.core.timestamps import Clock, utc_now
from docdoctor.verification.models import (
    DocumentContext,
    ReferenceCandidate,
    ReferenceType,
    ToolCallRecord,
    ToolResult,
    VerificationMethod,
    VerificationSummary,
    VerifiedReference,
)
from docdoctor.verification.normalize import (
    normalize_doi,
    normalize_url,
    normalize_vault_path,
    registrable_domain,
)

logger = get_logger(__name__)

TOOL_CALL_CONFIDENCE = 1.0
SAME_DOMAIN_CONFIDENCE = 0.7
TITLE_OVERLAP_THRESHOLD = 0.5
KEY_PHRASE_MIN_LENGTH = 15
PHRASE_OVERLAP_THRESHOLD = 0.5
PHRASE_OVERLAP_MIN_WORDS = 3


def _words(text: str, min_length: int) -> set[str]:
    return {w for w in text.split() if len(w) > min_length}


def word_overlap(a: str, b: str) -> float:
    """Shared words longer than 3 characters over the larger word set."""
    words_a = _words(a, 3)
    words_b = _words(b, 3)
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def _link_target(value: str) -> str:
    """Vault link reduced to its note path: no alias, heading, ``.md`` or leading slash."""
    target = normalize_vault_path(value).split("|", 1)[0].split("#", 1)[0].strip()
    if target.endswith(".md"):
        target = target[: -len(".md")]
    return target.lstrip("/")


def _coerce_result(result: ToolResult | dict[str, Any]) -> ToolResult:
    return result if isinstance(result, ToolResult) else ToolResult.from_dict(result)


class ReferenceVerifier:
    """
    Evidence store and reference classifier for one verification session.

    Call :meth:`clear` between documents.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or utc_now
        self.tool_calls: list[ToolCallRecord] = []
        self._urls: set[str] = set()
        self._dois: set[str] = set()
        self._vault_paths: set[str] = set()
        self.document_context: DocumentContext | None = None

    # ── Evidence ─────────────────────────────────────────────────────────

    def record_tool_call(
        self,
        tool: str,
        args: dict[str, Any],
        results: Iterable[ToolResult | dict[str, Any]],
    ) -> None:
        record = ToolCallRecord(
            tool=tool,
            args=dict(args),
            results=[_coerce_result(r) for r in results],
            timestamp=self._clock(),
        )
        self.tool_calls.append(record)

        for result in record.results:
            if result.url:
                self._urls.add(normalize_url(result.url))
            if result.doi:
                self._dois.add(normalize_doi(result.doi))
            if result.vault_path:
                self._vault_paths.add(normalize_vault_path(result.vault_path))

        logger.debug("tool_call_recorded", tool=tool, result_count=len(record.results))

    def set_document_context(self, context: DocumentContext | None) -> None:
        self.document_context = context

    def clear(self) -> None:
        """Drop all evidence and the document context."""
        self.tool_calls.clear()
        self._urls.clear()
        self._dois.clear()
        self._vault_paths.clear()
        self.document_context = None

    # ── Verification ─────────────────────────────────────────────────────

    def was_verified_by_tool(self, candidate: ReferenceCandidate) -> bool:
        """True if recorded evidence contains exactly this reference."""
        if candidate.type == ReferenceType.EXTERNAL_URL:
            return normalize_url(candidate.reference) in self._urls
        if candidate.type == ReferenceType.ACADEMIC_DOI:
            return normalize_doi(candidate.reference) in self._dois
        if candidate.type == ReferenceType.VAULT_LINK:
            return normalize_vault_path(candidate.reference) in self._vault_paths
        if candidate.type == ReferenceType.CITATION:
            return self._find_matching_result(candidate.reference) is not None
        return False

    def verify_reference(self, candidate: ReferenceCandidate) -> VerifiedReference:
        if self._is_self_reference(candidate):
            verified = VerifiedReference.from_candidate(
                candidate,
                verified=False,
                method=VerificationMethod.SELF_REFERENCE,
                confidence=0.0,
                details="Reference appears to cite document content",
            )
        elif self.was_verified_by_tool(candidate):
            match = self._find_matching_result(candidate.reference)
            verified = VerifiedReference.from_candidate(
                candidate,
                verified=True,
                method=VerificationMethod.TOOL_CALL,
                confidence=TOOL_CALL_CONFIDENCE,
                details=f"Found in {match[0]} results" if match else "Matched tool result",
            )
        elif (pattern := self._find_pattern_match(candidate)) is not None:
            confidence, details = pattern
            verified = VerifiedReference.from_candidate(
                candidate,
                verified=True,
                method=VerificationMethod.PATTERN_MATCH,
                confidence=confidence,
                details=f"Partial match: {details}",
            )
        else:
            verified = VerifiedReference.from_candidate(
                candidate,
                verified=False,
                method=VerificationMethod.UNVERIFIED,
                confidence=0.0,
                details="No matching tool call result found",
            )

        logger.debug(
            "reference_verified",
            reference=candidate.reference,
            reference_type=candidate.type.value,
            method=verified.verification_method.value,
            confidence=verified.confidence,
        )
        return verified

    def verify_all(self, candidates: Iterable[ReferenceCandidate]) -> list[VerifiedReference]:
        return [self.verify_reference(c) for c in candidates]

    def get_verification_summary(self, verified: list[VerifiedReference]) -> VerificationSummary:
        """Counts by outcome; the rate is 1.0 when there is nothing to verify."""
        counts = {method.value: 0 for method in VerificationMethod}
        for ref in verified:
            counts[ref.verification_method.value] += 1

        total = len(verified)
        verified_count = sum(1 for ref in verified if ref.verified)
        self_references = counts[VerificationMethod.SELF_REFERENCE.value]
        unverified = sum(
            1
            for ref in verified
            if not ref.verified and ref.verification_method != VerificationMethod.SELF_REFERENCE
        )
        counts[VerificationMethod.UNVERIFIED.value] = unverified

        return VerificationSummary(
            total=total,
            verified=verified_count,
            unverified=unverified,
            self_references=self_references,
            verification_rate=verified_count / total if total else 1.0,
            tool_calls_used=len(self.tool_calls),
            by_method=counts,
        )

    # ── Checks ───────────────────────────────────────────────────────────

    def _is_self_reference(self, candidate: ReferenceCandidate) -> bool:
        context = self.document_context
        if context is None:
            return False

        if candidate.type == ReferenceType.VAULT_LINK:
            ref_target = _link_target(candidate.reference)
            doc_target = _link_target(context.path)
            if ref_target and doc_target:
                return ref_target == doc_target or ref_target.endswith(doc_target)
            return False

        if candidate.type != ReferenceType.CITATION:
            return False

        ref_lower = candidate.reference.strip().lower()
        if not ref_lower:
            return False

        title = context.title.strip().lower()
        if title and (ref_lower == title or title in ref_lower or ref_lower in title):
            return True

        for phrase in context.key_phrases:
            phrase_lower = phrase.strip().lower()
            if len(phrase_lower) > KEY_PHRASE_MIN_LENGTH and phrase_lower in ref_lower:
                return True

        # Plain-text citations that paraphrase the document's own key phrases
        if "http" not in ref_lower and "10." not in ref_lower:
            ref_words = _words(ref_lower, 4)
            for phrase in context.key_phrases:
                phrase_words = _words(phrase.lower(), 4)
                if not ref_words or not phrase_words:
                    continue
                overlap = len(ref_words & phrase_words)
                ratio = overlap / min(len(ref_words), len(phrase_words))
                if ratio > PHRASE_OVERLAP_THRESHOLD and overlap >= PHRASE_OVERLAP_MIN_WORDS:
                    return True

        return False

    def _find_matching_result(self, reference: str) -> tuple[str, ToolResult] | None:
        """First recorded result that matches the reference exactly or contains it."""
        ref_lower = reference.strip().lower()
        url, doi, vault_path = (
            normalize_url(reference),
            normalize_doi(reference),
            normalize_vault_path(reference),
        )

        for call in self.tool_calls:
            for result in call.results:
                if result.url and normalize_url(result.url) == url:
                    return call.tool, result
                if result.doi and normalize_doi(result.doi) == doi:
                    return call.tool, result
                if result.vault_path and normalize_vault_path(result.vault_path) == vault_path:
                    return call.tool, result
                if ref_lower and result.title and ref_lower in result.title.lower():
                    return call.tool, result
                if ref_lower and result.snippet and ref_lower in result.snippet.lower():
                    return call.tool, result
        return None

    def _find_pattern_match(self, candidate: ReferenceCandidate) -> tuple[float, str] | None:
        ref_lower = candidate.reference.lower()
        ref_domain = (
            registrable_domain(candidate.reference)
            if candidate.type == ReferenceType.EXTERNAL_URL
            else None
        )

        for call in self.tool_calls:
            for result in call.results:
                if ref_domain and result.url and registrable_domain(result.url) == ref_domain:
                    return SAME_DOMAIN_CONFIDENCE, f"Same domain ({ref_domain}) found in {call.tool}"

                if result.title:
                    overlap = word_overlap(ref_lower, result.title.lower())
                    if overlap > TITLE_OVERLAP_THRESHOLD:
                        return overlap, f"Title similarity ({round(overlap * 100)}%) in {call.tool}"
        return None


__all__ = ["ReferenceVerifier", "word_overlap"]
