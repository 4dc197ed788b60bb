"""
core.log — Console output for packcore.

All progress and diagnostics go to stderr through one shared
``rich.Console`` so that stdout stays clean for the archive path.
Debug traces are gated by ``set_debug`` (wired to ``Config.debug``).
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)

_debug_enabled = False


def set_debug(enabled: bool) -> None:
    global _debug_enabled
    _debug_enabled = enabled


def debug_enabled() -> bool:
    return _debug_enabled


def debug_print(module: str, msg: str, *, enabled: bool | None = None) -> None:
    """Print a bracketed debug message when debugging is on."""
    if enabled is None:
        enabled = _debug_enabled
    if enabled:
        console.print(f"[dim]\\[DEBUG:{module}] {escape(msg)}[/]", highlight=False)


def step(msg: str) -> None:
    """Announce a pipeline stage."""
    console.print(f"[dim]→ {escape(msg)}[/]")


def warn(msg: str) -> None:
    console.print(f"[yellow]⚠ {escape(msg)}[/]")


def error(msg: str) -> None:
    console.print(f"[red]✗ {escape(msg)}[/]")
