"""
CLI package for family_graph.

Provides the Typer application entrypoint and shared CLI utilities.
"""

from family_graph.cli.app import app, main

__all__ = [
    "app",
    "main",
]
