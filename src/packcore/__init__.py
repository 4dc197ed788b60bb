"""
packcore — Core dump collection and packaging toolkit.

Architecture:
    core/       Shared models, configuration, logging, error types
    infra/      External tool detection, process environment, preflight checks
    collect/    Library resolution, artifact copying, launcher script,
                bundle verification and archiving
    cli/        Typer CLI entry-points
"""

__version__ = "0.1.0"
