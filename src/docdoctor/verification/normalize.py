"""
Normalization of reference strings for equality comparison.

Every normalizer is idempotent: ``normalize(normalize(x)) == normalize(x)``.
That lets the verifier index normalized evidence once and compare it with
normalized candidates, whichever side was normalized first.

- URL: lower-cased scheme and host, path without trailing slashes, query
  kept verbatim, fragment, port and credentials dropped. Anything that does
  not parse as an absolute URL is lower-cased and trimmed instead.
- DOI: the ``10.NNNN/...`` part, lower-cased.
- Vault path: ``[[...]]`` markers removed, trimmed, lower-cased.
"""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlsplit

DOI_PATTERN = re.compile(r"10\.\d{4,}/\S+")
_LINK_MARKERS = re.compile(r"^(?:\[\[)+|(?:\]\])+$")

# Public suffixes under which registrations happen at the third label
_SECOND_LEVEL_SUFFIXES = frozenset({
    "co.uk", "ac.uk", "gov.uk", "org.uk", "ltd.uk", "me.uk",
    "com.au", "net.au", "org.au", "edu.au", "gov.au",
    "co.nz", "org.nz", "ac.nz",
    "co.jp", "ac.jp", "or.jp", "ne.jp",
    "com.br", "com.cn", "edu.cn", "ac.in", "co.in",
    "co.za", "ac.za",
})

# Hosting suffixes where each subdomain belongs to a different owner
_PRIVATE_SUFFIXES = frozenset({
    "github.io", "gitlab.io", "readthedocs.io", "netlify.app", "vercel.app",
    "pages.dev", "herokuapp.com", "blogspot.com", "wordpress.com", "substack.com",
})

_SHARED_SUFFIXES = _SECOND_LEVEL_SUFFIXES | _PRIVATE_SUFFIXES


def normalize_url(url: str) -> str:
    """Canonical form of an absolute URL; see module docstring."""
    value = url.strip()
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError:
        return value.lower()

    if not parts.scheme or not parts.netloc or not hostname:
        return value.lower()

    if ":" in hostname:
        hostname = f"[{hostname}]"
    query = f"?{parts.query}" if parts.query else ""
    return f"{parts.scheme.lower()}://{hostname}{parts.path.rstrip('/')}{query}"


def normalize_doi(doi: str) -> str:
    match = DOI_PATTERN.search(doi)
    if match:
        return match.group(0).lower()
    return doi.strip().lower()


def normalize_vault_path(path: str) -> str:
    value = path.strip()
    while True:
        stripped = _LINK_MARKERS.sub("", value).strip()
        if stripped == value:
            return value.lower()
        value = stripped


def url_hostname(url: str) -> str | None:
    """Lower-cased host of an absolute URL, or None if it has none."""
    try:
        parts = urlsplit(url.strip())
        return parts.hostname if parts.scheme and parts.hostname else None
    except ValueError:
        return None


def registrable_domain(url: str) -> str | None:
    """
    Registrable domain of a URL: ``https://www.nature.com/x`` → ``nature.com``.

    Uses a small table of second-level public suffixes (``co.uk``,
    ``com.au``, ...) and common hosting suffixes (``github.io``,
    ``netlify.app``, ...) rather than the full public suffix list. Hosts
    under a shared suffix missing from these tables collapse to that
    suffix, so two unrelated tenants of it count as the same site. IP hosts
    are returned unchanged.
    """
    hostname = url_hostname(url)
    if hostname is None:
        return None

    try:
        ipaddress.ip_address(hostname)
        return hostname
    except ValueError:
        pass

    labels = hostname.rstrip(".").split(".")
    if labels[0] == "www" and len(labels) > 2:
        labels = labels[1:]
    if len(labels) >= 3 and ".".join(labels[-2:]) in _SHARED_SUFFIXES:
        return ".".join(labels[-3:])
    return ".".join(labels[-2:])


__all__ = [
    "DOI_PATTERN",
    "normalize_url",
    "normalize_doi",
    "normalize_vault_path",
    "url_hostname",
    "registrable_domain",
]
