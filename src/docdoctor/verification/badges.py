"""Display classification for verified references."""

from __future__ import annotations

from docdoctor.verification.models import VerificationBadge, VerificationMethod, VerifiedReference

VERIFIED_CONFIDENCE = 0.9


def get_verification_badge(ref: VerifiedReference) -> VerificationBadge:
    """
    Map a verified reference to a badge.

    - ``alert`` / Self-reference: method is ``self_reference``
    - ``success`` / Verified: verified with confidence >= 0.9
    - ``partial`` / Partial match: verified with lower confidence
    - ``warning`` / Unverified: anything else
    """
    if ref.verification_method == VerificationMethod.SELF_REFERENCE:
        return VerificationBadge(
            severity="alert",
            icon="alert-circle",
            color="#e74c3c",
            label="Self-reference",
            tooltip="This appears to cite the document itself, which is not a valid source.",
        )

    if ref.verified and ref.confidence >= VERIFIED_CONFIDENCE:
        return VerificationBadge(
            severity="success",
            icon="check-circle",
            color="#2ecc71",
            label="Verified",
            tooltip=f"Verified through {ref.verification_method.value}: {ref.verification_details}",
        )

    if ref.verified:
        return VerificationBadge(
            severity="partial",
            icon="check",
            color="#f39c12",
            label="Partial match",
            tooltip=f"Partially verified ({round(ref.confidence * 100)}%): {ref.verification_details}",
        )

    return VerificationBadge(
        severity="warning",
        icon="alert-triangle",
        color="#e67e22",
        label="Unverified",
        tooltip="This reference could not be verified through search tools. Please verify manually.",
    )


__all__ = ["get_verification_badge", "VERIFIED_CONFIDENCE"]
