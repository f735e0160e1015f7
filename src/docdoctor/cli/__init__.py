"""Typer application over the orchestration, health and verification engines."""

from docdoctor.cli.app import app

__all__ = ["app"]
