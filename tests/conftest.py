"""
Shared pytest fixtures and configuration for docdoctor tests.

This module provides:
- A controllable clock, so time-dependent logic is tested without sleeping
- Builders for annotations and document snapshots
- Environment isolation for DOCDOCTOR_* settings

Usage:
    def test_something(clock, make_document):
        clock.advance(days=1)
        doc = make_document([{"id": "a", "type": "source"}])
"""

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

# Ensure docdoctor package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docdoctor.orchestration.models import Annotation, DocumentState


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep host DOCDOCTOR_* variables and .env files out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("DOCDOCTOR_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_annotation():
    """Factory for annotations; keyword arguments become properties."""

    def _make(id: str, type: str = "source", **properties: Any) -> Annotation:
        return Annotation(id=id, type=type, description=f"{type} work for {id}", properties=properties)

    return _make


@pytest.fixture
def make_document():
    """Factory for ``DocumentState`` from annotations or annotation dicts."""

    def _make(
        annotations: list[Annotation | dict[str, Any]] | None = None,
        refinement: float = 0.5,
        path: str = "notes/essay.md",
        **kwargs: Any,
    ) -> DocumentState:
        items = [
            a if isinstance(a, Annotation) else Annotation.from_dict(a)
            for a in (annotations or [])
        ]
        return DocumentState(
            path=path,
            title=kwargs.pop("title", "Essay"),
            refinement=refinement,
            annotations=items,
            **kwargs,
        )

    return _make
