"""
Reference extraction from free text.

Three independent passes (URLs, DOIs, ``[[vault links]]``) produce
candidates in pass order, each with up to 50 characters of surrounding
text. Duplicates by (type, reference) are dropped, first occurrence wins.
Trailing punctuation is kept as part of the match.

Examples:
    >>> [c.reference for c in extract_references("See https://a.org/x and [[Notes/B]].")]
    ['https://a.org/x', 'Notes/B']
"""

from __future__ import annotations

import re

from docdoctor.verification.models import ReferenceCandidate, ReferenceType

URL_PATTERN = re.compile(r"https?://[^\s<>)\"']+", re.IGNORECASE)
DOI_PATTERN = re.compile(r"10\.\d{4,}/[^\s<>)\"']+", re.IGNORECASE)
VAULT_LINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")

CONTEXT_WINDOW = 50


def context_around(text: str, fragment: str, window: int = CONTEXT_WINDOW) -> str:
    """Text around the first occurrence of ``fragment``; empty if absent."""
    index = text.find(fragment)
    if index == -1:
        return ""
    start = max(0, index - window)
    end = min(len(text), index + len(fragment) + window)
    return text[start:end].strip()


def extract_references(text: str) -> list[ReferenceCandidate]:
    candidates: list[ReferenceCandidate] = []

    for match in URL_PATTERN.finditer(text):
        url = match.group(0)
        candidates.append(
            ReferenceCandidate(url, ReferenceType.EXTERNAL_URL, context_around(text, url))
        )

    for match in DOI_PATTERN.finditer(text):
        doi = match.group(0)
        candidates.append(
            ReferenceCandidate(doi, ReferenceType.ACADEMIC_DOI, context_around(text, doi))
        )

    for match in VAULT_LINK_PATTERN.finditer(text):
        candidates.append(
            ReferenceCandidate(
                match.group(1),
                ReferenceType.VAULT_LINK,
                context_around(text, match.group(0)),
            )
        )

    return deduplicate(candidates)


def deduplicate(candidates: list[ReferenceCandidate]) -> list[ReferenceCandidate]:
    seen: set[tuple[ReferenceType, str]] = set()
    unique = []
    for candidate in candidates:
        key = (candidate.type, candidate.reference)
        if key not in seen:
            seen.add(key)
            unique.append(candidate)
    return unique


__all__ = [
    "URL_PATTERN",
    "DOI_PATTERN",
    "VAULT_LINK_PATTERN",
    "context_around",
    "extract_references",
    "deduplicate",
]
