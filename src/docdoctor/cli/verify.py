"""
CLI: ``docdoctor verify``: check references in a text against tool evidence.
"""

from __future__ import annotations

from pathlib import Path

import typer

from docdoctor.cli.utils import _print_dict, fail, load_list, output_items, print_json
from docdoctor.core.errors import DocDoctorError, ParseError


def verify_text(
    text: Path = typer.Argument(..., help="Text file to scan for references"),
    evidence: Path = typer.Option(
        ..., "--evidence", "-e", help="JSON/YAML list of tool calls: {tool, args, results}"
    ),
    document_path: str | None = typer.Option(
        None, "--document-path", help="Path of the document the text belongs to"
    ),
    title: str = typer.Option("", "--title", help="Document title"),
    key_phrases: list[str] = typer.Option(
        [], "--key-phrase", "-k", help="Key phrase of the document (repeatable)"
    ),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Extract references from TEXT and verify them against EVIDENCE."""
    from docdoctor.verification import (
        DocumentContext,
        ReferenceVerifier,
        extract_references,
        get_verification_badge,
    )

    verifier = ReferenceVerifier()
    try:
        try:
            content = text.read_text(encoding="utf-8")
        except OSError as exc:
            raise ParseError(f"Cannot read {text}: {exc.strerror or exc}", cause=exc) from exc

        for index, call in enumerate(load_list(evidence)):
            if not isinstance(call, dict) or "tool" not in call:
                raise ParseError(f"Tool call #{index} has no 'tool' field").with_context(
                    source=str(evidence)
                )
            results = call.get("results") or []
            if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
                raise ParseError(
                    f"Tool call #{index} results must be a list of mappings"
                ).with_context(source=str(evidence))
            verifier.record_tool_call(call["tool"], call.get("args") or {}, results)
    except DocDoctorError as exc:
        fail(exc)

    if document_path:
        verifier.set_document_context(
            DocumentContext(path=document_path, title=title, key_phrases=list(key_phrases))
        )

    verified = verifier.verify_all(extract_references(content))
    summary = verifier.get_verification_summary(verified)

    if json_out:
        print_json({
            "references": [
                {**ref.to_dict(), "badge": get_verification_badge(ref).label} for ref in verified
            ],
            "summary": summary.to_dict(),
        })
        return

    output_items(
        [
            {
                "reference": ref.reference,
                "type": ref.type,
                "method": ref.verification_method,
                "confidence": ref.confidence,
                "badge": get_verification_badge(ref).label,
            }
            for ref in verified
        ],
        title="References",
    )
    _print_dict(summary.to_dict(), title="Summary")
