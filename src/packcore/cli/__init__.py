"""
cli — Typer CLI entry-point for packcore.

Commands:
    collect     Package a core file into a tarball
    tools       Show detected external tools
"""

from .app import app, main

__all__ = ["app", "main"]
