"""
cli.app — Typer application for packcore.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from ..core.config import load_config
from ..core.errors import CollectionCancelled, PackcoreError
from ..core.log import console, error, set_debug
from ..core.models import CollectOptions, Tool

app = typer.Typer(
    name="packcore",
    help=(
        "Package a core file with the binary that produced it and every "
        "shared library it needs into a single tarball for offline debugging."
    ),
    no_args_is_help=True,
)


def _build_config(**cli_overrides: object):
    """Build a ``Config`` from .env + CLI overrides, dropping None values."""
    cfg = load_config(**{k: v for k, v in cli_overrides.items() if v is not None})
    set_debug(cfg.debug)
    return cfg


def _prompt(question: str, default: bool) -> bool:
    return typer.confirm(question, default=default, err=True)


@app.command()
def collect(
    core: str = typer.Argument(help="Path to the core file"),
    binary: Optional[str] = typer.Option(
        None, "--binary", "-b",
        help="Binary that produced the core (detected from the core when omitted)",
    ),
    keep_tmp_dir: bool = typer.Option(
        False, "--keep-tmp-dir", help="Do not remove the temp directory after packaging",
    ),
    ignore_missing: bool = typer.Option(
        False, "--ignore-missing", help="Package even when some libraries cannot be found",
    ),
    yes: bool = typer.Option(False, "--yes", "-a", help="Answer yes to every prompt"),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o", help="Where the temp directory and tarball are created",
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", min=1, help="Seconds before an external tool is abandoned",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """Collect a core file, its binary and shared libraries into a tarball."""
    from ..collect.pipeline import collect_core

    cfg = _build_config(
        work_dir=output_dir,
        tool_timeout=timeout,
        debug=debug or None,
    )
    options = CollectOptions(
        core=core,
        binary=binary,
        keep_staging=keep_tmp_dir,
        ignore_missing=ignore_missing,
        assume_yes=yes,
    )
    try:
        result = collect_core(options, cfg, confirm=_prompt)
    except CollectionCancelled as e:
        console.print(f"[yellow]{e}[/]")
        raise typer.Exit(e.exit_code)
    except PackcoreError as e:
        error(str(e))
        raise typer.Exit(1)

    console.print("[green]✓[/] Packcore generated:")
    if result.staging_kept:
        console.print(f"  [dim]temp directory kept at {result.staging}[/]")
    typer.echo(str(result.archive))


@app.command()
def tools(
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """Show which external tools packcore can use on this host."""
    from ..infra.tools import detect_capabilities, tool_command

    cfg = _build_config(debug=debug or None)
    caps = detect_capabilities(cfg)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Tool", min_width=12)
    table.add_column("Command")
    table.add_column("Path")
    for tool in Tool:
        path = caps.path(tool)
        table.add_row(
            tool.value,
            tool_command(tool, cfg),
            path if path else "[red]not found[/]",
        )
    console.print(table)

    if not (caps.has(Tool.GDB) or caps.has(Tool.LDD)):
        error("Neither gdb nor ldd is available; libraries cannot be resolved")
        raise typer.Exit(1)


def main() -> None:
    """Entry-point registered in pyproject.toml."""
    app()
