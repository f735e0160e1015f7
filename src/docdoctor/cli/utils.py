"""
CLI utility helpers for input loading and output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any, NoReturn

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docdoctor.core.errors import DocDoctorError, ParseError

console = Console()
err_console = Console(stderr=True)


# ── Input helpers ────────────────────────────────────────────────────────


def load_structured(path: Path) -> Any:
    """Read a YAML or JSON file (JSON is parsed as YAML)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Cannot read {path}: {exc.strerror or exc}", cause=exc).with_context(
            source=str(path)
        ) from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML/JSON in {path}", cause=exc).with_context(
            source=str(path)
        ) from exc


def load_mapping(path: Path) -> dict[str, Any]:
    data = load_structured(path)
    if not isinstance(data, dict):
        raise ParseError(f"Expected a mapping at the top of {path}").with_context(source=str(path))
    return data


def load_list(path: Path) -> list[Any]:
    data = load_structured(path)
    if not isinstance(data, list):
        raise ParseError(f"Expected a list at the top of {path}").with_context(source=str(path))
    return data


def fail(error: DocDoctorError) -> NoReturn:
    """Print a Doc Doctor error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def _plain(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float):
        return f"{value:.3f}"
    if isinstance(value, list):
        return ", ".join(_plain(v) for v in value) or "-"
    if value is None:
        return "-"
    return str(value)


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def _print_table(items: list, *, title: str = "") -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(escape(_plain(v)) for v in d.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {escape(_plain(v))}")


def output_items(items: list, *, title: str = "") -> None:
    if not items:
        console.print("[dim]No items.[/dim]")
        return
    _print_table(items, title=title)
