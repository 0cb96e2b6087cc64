"""Command line interface."""

from trackbridge.infrastructure.cli.app import app, main

__all__ = ["app", "main"]
