"""Command-line interface for Routing Policy Sync."""

from .main import cli, main

__all__ = ["cli", "main"]
