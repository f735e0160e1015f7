"""
Doc Doctor Verification - checks that claimed references are backed by tool evidence.

MODULE MAP
──────────
1. normalize.py   ─ idempotent URL / DOI / vault-path normalizers
2. models.py      ─ candidates, tool evidence, verified references
3. extraction.py  ─ regex extraction of candidates from text
4. verifier.py    ─ ReferenceVerifier (self-reference, tool call, pattern match)
5. badges.py      ─ display classification of results
"""

from docdoctor.verification.badges import get_verification_badge
from docdoctor.verification.extraction import extract_references
from docdoctor.verification.models import (
    DocumentContext,
    ReferenceCandidate,
    ReferenceType,
    ToolCallRecord,
    ToolResult,
    VerificationBadge,
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
from docdoctor.verification.verifier import ReferenceVerifier

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
    "normalize_url",
    "normalize_doi",
    "normalize_vault_path",
    "registrable_domain",
    "extract_references",
    "ReferenceVerifier",
    "get_verification_badge",
]
