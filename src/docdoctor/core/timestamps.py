"""
Identifier and timestamp utilities (stdlib-only).

Plans, traces and snapshots carry prefixed, time-ordered ids
(``plan-1718000000000-a1b2c3``) and timezone-aware UTC timestamps. A
``Clock`` is any zero-argument callable returning an aware datetime; the
orchestrator and health monitor accept one so that time can be fixed in
tests.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def generate_id(prefix: str, random_bytes: int = 3) -> str:
    """Generate ``<prefix>-<epoch ms>-<hex>``; ids sort by creation time."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(random_bytes)}"


__all__ = ["Clock", "utc_now", "generate_id"]
